"""
Simulation Module

This module defines the abstract base class for simulations, with built-in
support for thread-based parallel evaluation of neural systems using joblib.

A simulation represents one independent run of an evolving population: organisms
sense their world, act on it through their neural systems, age, die and
replicate, epoch after epoch, until the maximum number of epochs is reached or
the population goes extinct.
"""

import numpy as np
from abc    import ABC, abstractmethod
from loguru import logger
from typing import Sequence

from evobits.phenotype  import Action, Organism
from evobits.pool       import Population
from evobits.run.config import Config

class Simulation(ABC):
    """
    Abstract base class for implementing a simulation.

    The world the organisms live in (what they sense, what their actions do, what
    makes them die or replicate, where newborns are placed) is entirely up to the
    subclass; this class runs the life cycle.

    Each epoch:
        1. For 'ticks_per_epoch' ticks: read the sensors of every organism, evaluate
           all neural systems, sample one action per organism and apply it.
        2. Every organism ages by one epoch.
        3. Dead organisms are removed from the population.
        4. Organisms able to replicate produce one offspring each, as long as the
           population is below 'max_population'.
        5. If 'recluster_each_epoch' is set, species are recomputed from scratch.

    Subclasses must implement:
    - _reset(): Reset simulation-specific state and call super()._reset()
    - _read_sensors(organism): The sensor vector of an organism
    - _apply_action(organism, action): Carry out the action chosen by an organism
    - _can_replicate(organism): Whether an organism replicates this epoch
    - _report_progress(): Display progress after each epoch
    - _final_report(): Display final results

    Subclasses can override:
    - _is_dead(organism): Default: the organism reached its lifespan
    - _place_offspring(parent, child): Default: nothing to do
    - _terminate(): Default: maximum number of epochs reached, or extinction

    Public Attributes:
        extinct: Whether the population died out before the end of the run

    Public Methods:
        run(): Execute a complete simulation

    Parallelization of neural system evaluation:
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of threads
        num_jobs=-1: Use all available CPU cores
    """

    def __init__(self, config: Config, suppress_output: bool = False):
        """
        Initialize the simulation.

        Parameters:
            config:          Configuration parameters
            suppress_output: If True, suppress progress and final reports
        """
        self._config         : Config              = config
        self._epoch_counter  : int                 = 0
        self._population     : Population          = None
        self._rng            : np.random.Generator = None
        self._suppress_output: bool                = suppress_output
        self.extinct         : bool                = False

    def run(self, num_jobs: int = 1):
        """
        Run the simulation.

        Resets the simulation state, creates the initial population and runs
        epochs until the terminate condition is met.

        Parameters:
            num_jobs: Number of threads used to evaluate the neural systems
                      1 = serial (no parallelization)
                     -1 = use all available CPU cores
                     >1 = use specified number of threads
        """
        self._config.validate()

        # Reset the simulation state before starting a new run
        self._reset()

        # Create the initial population
        self._population = Population(self._config, self._rng)
        logger.debug("[Simulation] Started with {} organisms in {} species",
                     len(self._population), self._population.species_count())

        while not self._terminate():
            self._run_epoch(num_jobs)
            self._epoch_counter += 1

            logger.debug("[Simulation] Epoch {}: {} organisms, {} species",
                         self._epoch_counter, len(self._population), self._population.species_count())

            # Display progress after each epoch
            if not self._suppress_output:
                self._report_progress()

        self.extinct = len(self._population) == 0
        logger.debug("[Simulation] Ended after {} epochs (extinct: {})", self._epoch_counter, self.extinct)

        # Produce final report
        if not self._suppress_output:
            self._final_report()

    def _run_epoch(self, num_jobs: int):
        """
        Run one epoch: ticks, aging, deaths, births and (optionally) reclustering.
        """
        for _ in range(self._config.ticks_per_epoch):
            self._tick(num_jobs)

        for organism in self._population.organisms:
            organism.age += 1

        for organism in [o for o in self._population.organisms if self._is_dead(o)]:
            self._population.remove(organism)

        # Offspring born in this epoch do not replicate before the next one
        parents = [o for o in self._population.organisms if self._can_replicate(o)]
        for parent in parents:
            if len(self._population) >= self._config.max_population:
                break
            child = self._population.add_offspring(parent)
            self._place_offspring(parent, child)

        if self._config.recluster_each_epoch:
            self._population.recluster()

    def _tick(self, num_jobs: int):
        """
        Evaluate the neural system of every organism once, and apply the resulting actions.
        """
        organisms = self._population.organisms
        if not organisms:
            return

        sensors = [self._read_sensors(organism) for organism in organisms]
        actions = self._population.decide_actions(sensors, num_jobs)
        for organism, action in zip(organisms, actions):
            self._apply_action(organism, action)

    def _terminate(self) -> bool:
        """
        Check whether the simulation should stop.

        Returns:
            True if the maximum number of epochs has been reached
            or the population is extinct
        """
        return self._epoch_counter >= self._config.max_epochs or len(self._population) == 0

    @abstractmethod
    def _reset(self):
        """
        Reset the simulation state before starting a new run.

        Subclasses should call super()._reset() and then
        initialize their world-specific data.
        """
        self._rng           = np.random.default_rng(self._config.seed)
        self._epoch_counter = 0
        self.extinct        = False

    @abstractmethod
    def _read_sensors(self, organism: Organism) -> Sequence[float]:
        """
        Return the sensor vector of an organism.

        Parameters:
            organism: the organism whose sensors are read

        Returns:
            One value per input node of the organism's neural system
        """
        pass

    @abstractmethod
    def _apply_action(self, organism: Organism, action: Action):
        """
        Carry out the action an organism has chosen.

        Parameters:
            organism: the acting organism
            action:   the action sampled from its neural system outputs
        """
        pass

    @abstractmethod
    def _can_replicate(self, organism: Organism) -> bool:
        """
        Whether an organism produces an offspring at the end of this epoch.
        """
        pass

    def _is_dead(self, organism: Organism) -> bool:
        """
        Whether an organism dies at the end of this epoch.
        By default, organisms die when they reach their lifespan.
        """
        return organism.age >= self._config.lifespan

    def _place_offspring(self, parent: Organism, child: Organism):
        """
        Place a newborn in the world (for example, next to its parent).
        """
        pass

    @abstractmethod
    def _report_progress(self):
        """
        Report simulation progress after each epoch.

        This method is suppressed by setting 'self._suppress_output' to 'True'.
        """
        pass

    @abstractmethod
    def _final_report(self):
        """
        Produce final report at the end of the simulation.

        This method is suppressed by setting 'self._suppress_output' to 'True'.
        """
        pass
