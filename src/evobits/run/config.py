import configparser
import os

from evobits.phenotype.action import N_ACTIONS

class Config:

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a default Config.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a Config with default values, for testing
                         and manual attribute setting.
        """

        # Default config for testing/manual setup
        if config_file is None:
            self.population_size      = 100
            self.genome_length        = 48
            self.num_connection_genes = 32
            self.num_neuron_genes     = 8

            self.num_inputs   = 11
            self.num_outputs  = 6
            self.source_value = 0.5

            self.mutate_gene_prob = 0.05
            self.insert_gene_prob = 0.01
            self.delete_gene_prob = 0.01

            self.compatibility_threshold = 0.1
            self.recluster_each_epoch    = False

            self.max_epochs      = 100
            self.ticks_per_epoch = 10
            self.max_population  = 500
            self.lifespan        = 50
            self.seed            = None

            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [POPULATION INIT]

        # The number of organisms created when the simulation starts.
        self.population_size = get_value('POPULATION_INIT', 'population_size', int)

        # The number of genes in the genome of each initial organism.
        self.genome_length = get_value('POPULATION_INIT', 'genome_length', int)

        # How many of the leading genes of an initial genome are forced to be
        # connection genes, and how many of the following ones neuron genes.
        # The remaining genes (if any) keep whatever variant they were drawn with.
        self.num_connection_genes = get_value('POPULATION_INIT', 'num_connection_genes', int)
        self.num_neuron_genes     = get_value('POPULATION_INIT', 'num_neuron_genes'    , int)

        # [NETWORK]

        # The number of input nodes (sensors) and output nodes (one per action).
        self.num_inputs  = get_value('NETWORK', 'num_inputs' , int)
        self.num_outputs = get_value('NETWORK', 'num_outputs', int)

        # The constant value internal source neurons (neurons without any
        # incoming connection, self-loops aside) are held at on every tick.
        self.source_value = get_value('NETWORK', 'source_value', float, default=0.5)

        # [REPLICATION]

        # Per-replication probabilities of a point mutation (one bit of one gene
        # flipped), of the insertion of a random gene and of the deletion of a gene.
        self.mutate_gene_prob = get_value('REPLICATION', 'mutate_gene_prob', float)
        self.insert_gene_prob = get_value('REPLICATION', 'insert_gene_prob', float)
        self.delete_gene_prob = get_value('REPLICATION', 'delete_gene_prob', float)

        # [SPECIATION]

        # Genomes whose genetic distance to a species' seed is less than
        # this threshold are considered to be in the same species.
        # An offspring further than this from its parent founds a new species.
        self.compatibility_threshold = get_value('SPECIATION', 'compatibility_threshold', float)

        # Whether to recluster the whole population at the end of each epoch.
        self.recluster_each_epoch = get_value('SPECIATION', 'recluster_each_epoch', bool, default=False)

        # [SIMULATION]

        # The number of epochs after which to stop the run.
        # The run may stop sooner, if the population goes extinct.
        self.max_epochs = get_value('SIMULATION', 'max_epochs', int)

        # The number of ticks (network evaluations) per epoch.
        self.ticks_per_epoch = get_value('SIMULATION', 'ticks_per_epoch', int)

        # Births are skipped while the population is at this size.
        self.max_population = get_value('SIMULATION', 'max_population', int)

        # Age (in epochs) at which an organism dies, unless the simulation decides otherwise.
        self.lifespan = get_value('SIMULATION', 'lifespan', int)

        # Seed for the random number generator; "none" for a non-reproducible run.
        self.seed = get_value('SIMULATION', 'seed', int, default=None)

    def validate(self) -> None:
        """
        Check the consistency of the configuration parameters.

        Raises:
            ValueError: describing the first inconsistency found
        """
        for name in ('population_size', 'genome_length', 'num_inputs', 'num_outputs',
                     'max_epochs', 'ticks_per_epoch', 'max_population', 'lifespan'):
            if getattr(self, name) < 1:
                raise ValueError(f"'{name}' must be positive, got {getattr(self, name)}")

        if self.num_outputs > N_ACTIONS:
            raise ValueError(f"'num_outputs' ({self.num_outputs}) exceeds the number of actions ({N_ACTIONS})")

        if self.num_connection_genes < 0 or self.num_neuron_genes < 0:
            raise ValueError("The number of typed genes cannot be negative")

        if self.num_connection_genes + self.num_neuron_genes > self.genome_length:
            raise ValueError(f"{self.num_connection_genes} connection and {self.num_neuron_genes} "
                             f"neuron genes do not fit in a genome of {self.genome_length} genes")

        for name in ('mutate_gene_prob', 'insert_gene_prob', 'delete_gene_prob'):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"'{name}' must be a probability, got {getattr(self, name)}")

        if self.compatibility_threshold < 0.0:
            raise ValueError(f"'compatibility_threshold' cannot be negative, got {self.compatibility_threshold}")

        if self.population_size > self.max_population:
            raise ValueError(f"'population_size' ({self.population_size}) exceeds "
                             f"'max_population' ({self.max_population})")
