"""
PyDVBScan - DVB Transponder Parameter Codec

Converts between the compact single-line text representation of a
digital-TV transponder's tuning parameters (as used in VDR channels.conf)
and structured in-memory records, and checks that a satellite transponder
can be reached through the receiver's LNB / DiSEqC setup.

Modules:
    Codec:
        - Params: Transponder parameter set and tag+digit string codec
        - Channel: Channel record, channel line and transponder summary
        - ChannelsConf: channels.conf file reader/writer

    Satellite:
        - SatIF: Intermediate frequency calculation and DiSEqC table

    Support:
        - units: Frequency normalization and number formatting
        - logconf: Logging setup (verbosity levels and targets)
"""

__version__ = "0.1.0"
__author__ = "PyDVBScan Contributors"

# Reserved "unset" marker of the parameter string grammar
UNSET = 999

# Delivery system tags and their transponder summary mnemonics
SOURCE_TYPES = {
    'A': 'ATSC',
    'C': 'C',
    'S': 'S',
    'T': 'T',
}

# Human readable delivery system names
SOURCE_NAMES = {
    'A': 'ATSC',
    'C': 'DVB-C',
    'S': 'DVB-S/S2',
    'T': 'DVB-T/T2',
}

# Satellite tuner intermediate frequency band (MHz, inclusive)
IF_MIN = 950
IF_MAX = 2150

# Universal LNB defaults (MHz)
LNB_SLOF = 11700
LNB_FREQ_LO = 9750
LNB_FREQ_HI = 10600

# Import main classes for convenience
from .Params import TransponderParams
from .Channel import Channel, Pid
from .SatIF import (
    DiseqcEntry, LnbSetup, valid_sat_if, intermediate_frequency,
    intermediate_frequencies, tunable_mask,
)
from .ChannelsConf import read_channels, write_channels

__all__ = [
    # Constants
    'UNSET', 'SOURCE_TYPES', 'SOURCE_NAMES', 'IF_MIN', 'IF_MAX',
    'LNB_SLOF', 'LNB_FREQ_LO', 'LNB_FREQ_HI',

    # Codec
    'TransponderParams', 'Channel', 'Pid', 'read_channels', 'write_channels',

    # Satellite
    'DiseqcEntry', 'LnbSetup', 'valid_sat_if', 'intermediate_frequency',
    'intermediate_frequencies', 'tunable_mask',
]
