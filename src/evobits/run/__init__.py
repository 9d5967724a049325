"""
Run Package

Configuration and the simulation driver.

Exported Classes:
    Config:     Configuration parameters, parsed from an INI file
    Simulation: Abstract base class for simulations
"""

from evobits.run.config     import Config
from evobits.run.simulation import Simulation

__all__ = ['Config',
           'Simulation']
