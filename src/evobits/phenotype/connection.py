"""
Connection Module

Classes:
    ConnectionType: Which partitions a connection links
    Connection:     A decoded, weighted edge of the neural system
"""

from dataclasses import dataclass
from enum        import Enum

from evobits.genotype          import Gene
from evobits.phenotype.ns_shape import NsShape

class ConnectionType(Enum):
    """
    A connection starts at an input node or a hidden node and ends at
    a hidden node or an output node.
    """
    INTERNAL = "H=>H"
    IN       = "I=>H"
    OUT      = "H=>O"
    IN_OUT   = "I=>O"

    @classmethod
    def from_sensors(cls, sensor_in: bool, sensor_out: bool) -> 'ConnectionType':
        if sensor_in and sensor_out:
            return cls.IN_OUT
        if sensor_in:
            return cls.IN
        if sensor_out:
            return cls.OUT
        return cls.INTERNAL

    @property
    def sensor_in(self) -> bool:
        return self in (ConnectionType.IN, ConnectionType.IN_OUT)

    @property
    def sensor_out(self) -> bool:
        return self in (ConnectionType.OUT, ConnectionType.IN_OUT)

@dataclass(frozen=True)
class Connection:
    """
    A weighted edge between two nodes of the neural system.

    The node indices are global: they already point into the input, hidden or
    output range of the network's shape. Connections only live during network
    construction; once the edges of the graph are built, they are discarded.

    Public Attributes:
        w:         Edge weight
        conn_type: Which partitions the edge links
        in_index:  Global index of the source node
        out_index: Global index of the destination node

    Class Methods:
        from_local(w, conn_type, in_index, out_index, shape): Remap partition-local indices
        from_gene(gene, shape):                               Decode a connection gene
    """
    w        : float
    conn_type: ConnectionType
    in_index : int
    out_index: int

    @classmethod
    def from_local(cls,
                   w        : float,
                   conn_type: ConnectionType,
                   in_index : int,
                   out_index: int,
                   shape    : NsShape) -> 'Connection | None':
        """
        Create a connection from indices local to their partitions.

        Each index is taken modulo the size of the partition it points into
        (input or hidden for the source, hidden or output for the destination)
        and then offset into that partition's global range. Any index is thus
        folded into a valid node.

        Parameters:
            w:         edge weight
            conn_type: which partitions the edge links
            in_index:  source index, local to the input or hidden partition
            out_index: destination index, local to the hidden or output partition
            shape:     the shape of the network

        Returns:
            The connection, or None if it points into an empty hidden partition
        """
        if conn_type.sensor_in:
            in_index = in_index % shape.input
        elif shape.hidden == 0:
            return None
        else:
            in_index = in_index % shape.hidden + shape.input

        if conn_type.sensor_out:
            out_index = out_index % shape.output + shape.input + shape.hidden
        elif shape.hidden == 0:
            return None
        else:
            out_index = out_index % shape.hidden + shape.input

        return cls(w, conn_type, in_index, out_index)

    @classmethod
    def from_gene(cls, gene: Gene, shape: NsShape) -> 'Connection | None':
        """
        Decode a connection gene into a connection of a network with the given shape.

        Returns:
            The connection, or None if it points into an empty hidden partition
        """
        conn_type = ConnectionType.from_sensors(gene.is_sensor_in(), gene.is_sensor_out())
        return cls.from_local(gene.get_conn_weight(), conn_type,
                              gene.get_in_index(), gene.get_out_index(), shape)

    def __str__(self):
        return f"[{self.conn_type.value},{self.in_index:02d}=>{self.out_index:02d},{self.w:+.02f}]"
