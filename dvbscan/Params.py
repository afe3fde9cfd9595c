"""
Transponder Parameter String

VDR style channel lists keep all modulation and coding parameters of a
transponder in one compact field: a sequence of single letter tags, each
followed by a decimal value, without separators. Polarization letters stand
alone.

    Tag  Field               Tag  Field
    B    Bandwidth           O    Roll-off
    C    Code rate (HP)      P    Stream id
    D    Code rate (LP)      Q    T2 system id
    G    Guard interval      S    Delivery system (0 = 1st, 1 = 2nd gen)
    I    Inversion           T    Transmission mode
    M    Modulation          X    SISO/MISO
    N    Pilot               Y    Hierarchy
    H/V/L/R  Polarization (satellite only)

Example: 'VC23M5O35S1' is a vertical DVB-S2 8PSK transponder with
code rate 2/3 and roll-off 0.35.

Which tags a delivery system writes, and in which order, is fixed:

    A (ATSC)         I M
    C (cable)        C I M
    S (satellite)    pol C I M [N O P] S
    T (terrestrial)  B C D G I M [P Q] S T [X] Y

Bracketed tags are written for second generation systems only.
"""

import logging
import string
from dataclasses import dataclass, replace
from typing import Optional

from . import UNSET
from .units import int_to_str, int_to_hex


logger = logging.getLogger(__name__)

# Tag letter -> field name
TAGS = {
    'B': 'bandwidth',
    'C': 'fec',
    'D': 'fec_low',
    'G': 'guard',
    'I': 'inversion',
    'M': 'modulation',
    'N': 'pilot',
    'O': 'rolloff',
    'P': 'stream_id',
    'Q': 'system_id',
    'S': 'delsys',
    'T': 'transmission',
    'X': 'miso',
    'Y': 'hierarchy',
}

POLARIZATIONS = 'HVLR'

# str.upper() would also fold non-ASCII letters ('ß' -> 'SS')
ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)

# Fields that always hold a value; everything else uses None for "unset"
DEFAULTED_FIELDS = ('bandwidth', 'modulation', 'delsys')


@dataclass
class TransponderParams:
    """
    Modulation and coding parameters of one transponder.

    Optional fields are None while unset; an unset field is never written.
    Bandwidth and modulation have no unset state, only a default. The
    delivery system flag is 0 for first generation standards (DVB-S, DVB-T,
    DVB-C) and 1 for their successors.

    Attributes:
        bandwidth: Channel bandwidth in MHz (terrestrial)
        fec: Code rate, high priority stream (e.g. 23 = 2/3)
        fec_low: Code rate, low priority stream (hierarchical DVB-T)
        guard: Guard interval (e.g. 8 = 1/8)
        polarization: 'H', 'V', 'L' or 'R'
        inversion: Spectral inversion
        modulation: Modulation (e.g. 2 = QPSK, 5 = 8PSK, 64 = QAM64)
        pilot: Pilot tones (DVB-S2)
        rolloff: Roll-off factor (DVB-S2, e.g. 35 = 0.35)
        stream_id: Input stream id / PLP
        system_id: T2 system id
        delsys: Delivery system generation
        transmission: Transmission mode (e.g. 8 = 8K)
        miso: SISO/MISO (DVB-T2)
        hierarchy: Hierarchy mode

    Example:
        >>> p = TransponderParams.from_string('vc23m5o35s1')
        >>> p.to_string('S')
        'VC23M5O35S1'
    """

    bandwidth: int = 8
    fec: Optional[int] = None
    fec_low: Optional[int] = None
    guard: Optional[int] = None
    polarization: Optional[str] = None
    inversion: Optional[int] = None
    modulation: int = 2
    pilot: Optional[int] = None
    rolloff: Optional[int] = None
    stream_id: Optional[int] = None
    system_id: Optional[int] = None
    delsys: int = 0
    transmission: Optional[int] = None
    miso: Optional[int] = None
    hierarchy: Optional[int] = None

    @classmethod
    def from_string(cls, text: str) -> 'TransponderParams':
        """Create a parameter set and parse `text` into it."""
        params = cls()
        params.parse(text)
        return params

    @property
    def is_second_generation(self) -> bool:
        """True for DVB-S2, DVB-T2 and DVB-C2."""
        return self.delsys == 1

    def is_set(self, name: str) -> bool:
        """Check whether field `name` carries a value that would be written."""
        value = getattr(self, name)
        return value is not None and value != UNSET

    def parse(self, text: str) -> None:
        """
        Parse a parameter string into this set.

        The string is case insensitive for ASCII letters and read left to
        right. Each tag takes the run of digits following it as its value; a
        tag without digits gets 0. A value of 999 leaves an optional field unset.

        Parsing stops at the first character that is not a known tag. Fields
        parsed up to that point stay applied, later ones keep their previous
        values, and an error is logged.

        Args:
            text: Parameter string, e.g. 'B8C23D0G8M64T8Y0'
        """
        text = text.translate(ASCII_UPPER)
        pos = 0
        end = len(text)

        while pos < end:
            c = text[pos]

            if c in POLARIZATIONS:
                self.polarization = c
                pos += 1
                continue

            name = TAGS.get(c)
            if name is None:
                logger.error("error in '%s': invalid char '%s'", text, c)
                return

            pos, value = self._value(text, pos + 1)
            if value == UNSET and name not in DEFAULTED_FIELDS:
                value = None
            setattr(self, name, value)

    @staticmethod
    def _value(text: str, pos: int):
        """Read a run of decimal digits; returns (next position, value)."""
        value = 0
        while pos < len(text) and '0' <= text[pos] <= '9':
            value = 10 * value + ord(text[pos]) - ord('0')
            pos += 1
        return pos, value

    def _tag(self, tag: str) -> str:
        name = TAGS[tag]
        if not self.is_set(name):
            return ''
        return tag + int_to_str(getattr(self, name))

    def to_string(self, source: str) -> str:
        """
        Write the canonical parameter string for a delivery system.

        Args:
            source: Delivery system tag, one of 'A', 'C', 'S', 'T'

        Returns:
            Parameter string; empty for an unknown delivery system
        """
        parts = []

        if source == 'A':
            parts += [self._tag('I'), self._tag('M')]

        elif source == 'C':
            parts += [self._tag('C'), self._tag('I'), self._tag('M')]

        elif source == 'S':
            if self.polarization:
                parts.append(self.polarization)
            parts += [self._tag('C'), self._tag('I'), self._tag('M')]
            if self.delsys:
                parts += [self._tag('N'), self._tag('O'), self._tag('P')]
            parts.append(self._tag('S'))

        elif source == 'T':
            parts += [self._tag('B'), self._tag('C'), self._tag('D'),
                      self._tag('G'), self._tag('I'), self._tag('M')]
            if self.delsys:
                parts += [self._tag('P'), self._tag('Q')]
            parts += [self._tag('S'), self._tag('T')]
            if self.delsys:
                parts.append(self._tag('X'))
            parts.append(self._tag('Y'))

        else:
            code = int_to_hex(ord(source[0])) if source else "''"
            logger.error("unknown source %s", code)

        return ''.join(parts)

    def copy(self) -> 'TransponderParams':
        """Independent copy of this parameter set."""
        return replace(self)
