"""
Foraging World Implementation

This module implements a simple foraging world for evolving organisms. The world
is a square grid holding food pellets and organisms. Organisms spend energy to
think and to move, regain it by stepping onto pellets, die when they run out of
energy (or of lifespan) and replicate once they have gathered enough of it.

Sensors:
    Each organism looks at the square area of radius SENSOR_RANGE centred on its
    position, but only sees the cells inside a cone of half-angle FOV_ANGLE around
    its heading. Pellets count as +1, other organisms as -1, each weighted by the
    inverse of its distance. The area is then collapsed column by column, giving
    2 * SENSOR_RANGE + 1 = 11 sensor values.

Actions:
    The six outputs of the neural system select one of HALT, MOVE_CONTINUE,
    MOVE_RANDOM, MOVE_REVERSE, ROTATE and ROTATE_COUNTER. Every action but HALT
    changes the heading and moves the organism one cell in the new direction, if
    that cell is inside the world and free of other organisms.

Classes:
    Simulation_Foraging: Simulation of organisms foraging for food pellets

Usage:
    config     = Config("configs/config_foraging.ini")
    simulation = Simulation_Foraging(config)
    simulation.run(num_jobs=1)
"""

import numpy as np
from pathlib    import Path
from statistics import mean

from evobits.phenotype  import Action, Organism
from evobits.run        import Config, Simulation

class Simulation_Foraging(Simulation):
    """
    Simulation of organisms foraging for food pellets on a bounded square grid.

    World state is kept outside the organisms, keyed by organism ID: positions,
    energies and the pellet map all belong to the simulation.

    Implemented Methods:
        _reset():                     Create an empty grid and scatter the initial pellets
        _read_sensors(organism):      Field-of-view sensor values
        _apply_action(organism, act): Pay the thinking cost, turn, move and eat
        _is_dead(organism):           Out of energy, or past its lifespan
        _can_replicate(organism):     Enough energy to split it with an offspring
        _place_offspring(p, c):       Newborns start next to their parent
        _report_progress():           Display epoch statistics
        _final_report():              Visualize the neural system of the oldest survivor
    """

    GRID_SIZE        = 64
    SENSOR_RANGE     = 5
    FOV_ANGLE        = np.radians(46.0)
    INITIAL_PELLETS  = 400
    PELLETS_PER_TICK = 4
    PELLET_ENERGY    = 0.2
    INITIAL_ENERGY   = 0.5
    MAX_ENERGY       = 1.0
    THINK_COST       = 1e-3
    MOVE_COST        = 1e-3
    REPLICATE_ENERGY = 0.8

    def _reset(self):
        """Reset simulation state."""
        super()._reset()

        self._pellets   = np.zeros((self.GRID_SIZE, self.GRID_SIZE), dtype=bool)
        self._occupants = {}   # (x, y)      => organism ID
        self._positions = {}   # organism ID => (x, y)
        self._energy    = {}   # organism ID => energy
        self._history   = []   # population size at the end of each epoch

        free = self._rng.choice(self.GRID_SIZE * self.GRID_SIZE, self.INITIAL_PELLETS, replace=False)
        self._pellets.flat[free] = True

    def _locate(self, organism: Organism):
        """
        Organisms of the initial population are given a random free cell the
        first time they are seen.
        """
        if organism.ID not in self._positions:
            while True:
                cell = tuple(int(c) for c in self._rng.integers(self.GRID_SIZE, size=2))
                if cell not in self._occupants:
                    break
            self._occupy(organism, cell)
            self._energy[organism.ID] = self.INITIAL_ENERGY
        return self._positions[organism.ID]

    def _occupy(self, organism: Organism, cell: tuple[int, int]):
        old = self._positions.get(organism.ID)
        if old is not None:
            del self._occupants[old]
        self._positions[organism.ID] = cell
        self._occupants[cell]        = organism.ID

    def _read_sensors(self, organism: Organism) -> np.ndarray:
        x0, y0 = self._locate(organism)
        dx, dy = organism.direction.value
        heading = np.arctan2(dy, dx)

        sensors = np.zeros(2 * self.SENSOR_RANGE + 1)
        for i, ox in enumerate(range(-self.SENSOR_RANGE, self.SENSOR_RANGE + 1)):
            for oy in range(-self.SENSOR_RANGE, self.SENSOR_RANGE + 1):
                if ox == 0 and oy == 0:
                    continue
                x, y = x0 + ox, y0 + oy
                if not (0 <= x < self.GRID_SIZE and 0 <= y < self.GRID_SIZE):
                    continue

                angle = np.arctan2(oy, ox) - heading
                angle = (angle + np.pi) % (2 * np.pi) - np.pi
                if abs(angle) > self.FOV_ANGLE:
                    continue

                weight = 1.0 / np.hypot(ox, oy)
                if self._pellets[x, y]:
                    sensors[i] += weight
                elif (x, y) in self._occupants:
                    sensors[i] -= weight

        return sensors

    def _apply_action(self, organism: Organism, action: Action):
        self._energy[organism.ID] -= self.THINK_COST
        if action is Action.HALT:
            return

        organism.direction = action.resolve_dir(organism.direction, self._rng)

        x, y   = self._positions[organism.ID]
        dx, dy = organism.direction.value
        target = (x + dx, y + dy)

        if not (0 <= target[0] < self.GRID_SIZE and 0 <= target[1] < self.GRID_SIZE):
            return
        if target in self._occupants:
            return

        self._occupy(organism, target)
        self._energy[organism.ID] -= self.MOVE_COST

        if self._pellets[target]:
            self._pellets[target] = False
            self._energy[organism.ID] = min(self._energy[organism.ID] + self.PELLET_ENERGY, self.MAX_ENERGY)

    def _tick(self, num_jobs: int):
        super()._tick(num_jobs)

        # Regrow a few pellets on free cells
        cells = self._rng.integers(self.GRID_SIZE, size=(self.PELLETS_PER_TICK, 2))
        for x, y in cells:
            if (int(x), int(y)) not in self._occupants:
                self._pellets[x, y] = True

    def _is_dead(self, organism: Organism) -> bool:
        dead = super()._is_dead(organism) or self._energy[organism.ID] <= 0.0
        if dead:
            del self._occupants[self._positions.pop(organism.ID)]
            del self._energy[organism.ID]
        return dead

    def _can_replicate(self, organism: Organism) -> bool:
        return self._energy[organism.ID] >= self.REPLICATE_ENERGY

    def _place_offspring(self, parent: Organism, child: Organism):
        """
        Put the newborn on a free cell next to its parent (or anywhere, if there is none),
        and split the parent's energy between the two.
        """
        x, y = self._positions[parent.ID]
        for dx, dy in self._rng.permutation([(1, 0), (-1, 0), (0, 1), (0, -1)]):
            cell = (int(x + dx), int(y + dy))
            if 0 <= cell[0] < self.GRID_SIZE and 0 <= cell[1] < self.GRID_SIZE and cell not in self._occupants:
                self._occupy(child, cell)
                break
        else:
            self._locate(child)

        half = self._energy[parent.ID] / 2
        self._energy[parent.ID] = half
        self._energy[child.ID]  = half

    def _report_progress(self):
        """
        Print a report describing the current epoch.
        """
        population = self._population
        self._history.append(len(population))

        ages     = [o.age for o in population] or [0]
        energies = list(self._energy.values()) or [0.0]
        nodes    = [o.neural_system.node_count for o in population] or [0]

        s  = f"EPOCH {self._epoch_counter:04d}: "
        s += f"organisms={len(population):4d}, "
        s += f"species={population.species_count():3d}, "
        s += f"mean age={mean(ages):5.1f}, "
        s += f"mean energy={mean(energies):.3f}, "
        s += f"mean nodes={mean(nodes):5.1f}, "
        s += f"pellets={int(self._pellets.sum())}"
        print(s)

    def _final_report(self):
        """
        Display results at the end of the simulation.
        """
        if self.extinct:
            print(f"\nPopulation went extinct after {self._epoch_counter} epochs")
            return

        oldest = max(self._population, key=lambda o: o.age)
        print(f"\nOldest survivor:\n{oldest}\n")
        print(oldest.neural_system)

        try:
            dot = oldest.neural_system.visualize()
            dot.render("oldest_survivor", format="pdf", cleanup=True)
            print("Network visualization saved as 'oldest_survivor.pdf'")
        except Exception as e:
            print(f"Could not visualize network: {e}")

if __name__ == '__main__':
    config_file = Path(__file__).parent / "configs" / "config_foraging.ini"
    config      = Config(str(config_file))
    simulation  = Simulation_Foraging(config)
    simulation.run(num_jobs=1)
