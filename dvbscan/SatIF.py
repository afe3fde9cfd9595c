"""
Satellite Intermediate Frequency Check

A satellite tuner never sees the transponder frequency itself. The LNB mixes
it down with its local oscillator (LOF) to an intermediate frequency, and the
tuner only covers 950..2150 MHz of IF. A universal LNB switches between a low
band oscillator (9750 MHz) and a high band oscillator (10600 MHz) at the
switch frequency (SLOF, 11700 MHz).

With DiSEqC enabled the oscillator comes from the diseqc.conf table instead:
the first entry whose source matches, whose SLOF lies above the transponder
frequency and whose polarization is the transponder's wins.

    # source  slof  pol  lof   commands
    S19.2E    11700  V   9750  t v W15 [E0 10 38 F0] W15 A W15 t
    S19.2E    99999  V  10600  t V W15 [E0 10 38 F1] W15 A W15 T

All frequencies here are MHz.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from . import IF_MIN, IF_MAX, LNB_SLOF, LNB_FREQ_LO, LNB_FREQ_HI
from .Channel import Channel
from .Params import POLARIZATIONS
from .units import reduce_to_mhz


logger = logging.getLogger(__name__)

# diseqc.conf source matching every satellite (rotor setups)
ROTOR_SOURCE = 'S*'


def source_matches(entry_source: str, source: str) -> bool:
    """Check whether a DiSEqC entry's source covers a channel source."""
    return (entry_source == source or
            (entry_source == ROTOR_SOURCE and source[:1] == 'S'))


@dataclass
class DiseqcEntry:
    """
    One diseqc.conf line.

    Attributes:
        source: Satellite source, e.g. 'S19.2E', or ROTOR_SOURCE
        slof: Entry applies to frequencies below this value (MHz)
        polarization: 'H', 'V', 'L' or 'R'
        lof: Local oscillator frequency to subtract (MHz)
        commands: Switch command sequence, kept verbatim
    """
    source: str
    slof: int
    polarization: str
    lof: int
    commands: str = ''

    def matches(self, source: str, frequency: int, polarization: Optional[str]) -> bool:
        return (source_matches(self.source, source) and
                self.slof > frequency and
                self.polarization == polarization)

    @classmethod
    def from_line(cls, line: str) -> 'DiseqcEntry':
        """
        Parse a diseqc.conf entry.

        Raises:
            ValueError: If the line has too few fields or bad values
        """
        parts = line.split(None, 4)
        if len(parts) < 4:
            raise ValueError(f"expected at least 4 fields, got {len(parts)}")

        source, slof, polarization, lof = parts[:4]
        polarization = polarization.upper()
        if len(polarization) != 1 or polarization not in POLARIZATIONS:
            raise ValueError(f"invalid polarization '{polarization}'")

        try:
            return cls(
                source=source,
                slof=int(slof),
                polarization=polarization,
                lof=int(lof),
                commands=parts[4] if len(parts) > 4 else '',
            )
        except ValueError:
            raise ValueError(f"invalid frequency in '{line.strip()}'") from None


@dataclass
class LnbSetup:
    """
    Receiver LNB configuration.

    Attributes:
        diseqc: Use the DiSEqC table instead of the fixed oscillators
        slof: Switch frequency between low and high band
        lnb_lo: Low band oscillator frequency
        lnb_hi: High band oscillator frequency
        diseqcs: DiSEqC table in file order

    Example:
        >>> setup = LnbSetup()
        >>> setup.lof('S19.2E', 11727, 'H')
        10600
    """
    diseqc: bool = False
    slof: int = LNB_SLOF
    lnb_lo: int = LNB_FREQ_LO
    lnb_hi: int = LNB_FREQ_HI
    diseqcs: List[DiseqcEntry] = field(default_factory=list)

    def find_diseqc(self, source: str, frequency: int,
                    polarization: Optional[str]) -> Optional[DiseqcEntry]:
        """First table entry serving this transponder, or None."""
        for d in self.diseqcs:
            if d.matches(source, frequency, polarization):
                return d
        return None

    def lof(self, source: str, frequency: int,
            polarization: Optional[str]) -> Optional[int]:
        """
        Local oscillator frequency for a transponder.

        Returns:
            LOF in MHz, or None if DiSEqC is on and no entry matches
        """
        if self.diseqc:
            d = self.find_diseqc(source, frequency, polarization)
            return d.lof if d else None
        return self.lnb_lo if frequency < self.slof else self.lnb_hi

    @classmethod
    def load_diseqc(cls, path: Union[str, Path], **kwargs) -> 'LnbSetup':
        """
        Create a DiSEqC enabled setup from a diseqc.conf file.

        Blank lines and comments are skipped, as are device selection
        lines ('1 2:'), which apply to the receiver and not to the table.

        Args:
            path: diseqc.conf path
            **kwargs: Further LnbSetup fields

        Raises:
            ValueError: If an entry is malformed
        """
        entries = []
        with open(path) as f:
            for number, line in enumerate(f, 1):
                line = line.split('#', 1)[0].strip()
                if not line:
                    continue
                if line.endswith(':'):
                    logger.debug("%s:%d: skipping device selection '%s'", path, number, line)
                    continue
                try:
                    entries.append(DiseqcEntry.from_line(line))
                except ValueError as e:
                    raise ValueError(f"{path}:{number}: {e}") from None

        logger.info("loaded %d diseqc entries from %s", len(entries), path)
        return cls(diseqc=True, diseqcs=entries, **kwargs)


def intermediate_frequency(channel: Channel, setup: LnbSetup) -> Optional[int]:
    """
    Intermediate frequency of a satellite channel.

    Returns:
        IF in MHz, or None if no DiSEqC entry serves the channel
    """
    f = reduce_to_mhz(channel.frequency)
    lof = setup.lof(channel.source, f, channel.params.polarization)
    if lof is None:
        return None
    return f - lof


def valid_sat_if(channel: Channel, setup: LnbSetup) -> bool:
    """
    Check that a satellite transponder can be tuned with this LNB setup.

    Rejections are logged; they are a normal outcome for transponders
    outside the LNB's range.

    Args:
        channel: Satellite channel
        setup: LNB configuration

    Returns:
        True if the intermediate frequency lies within 950..2150 MHz
    """
    pol = channel.params.polarization or '-'
    f = intermediate_frequency(channel, setup)

    if f is None:
        logger.error("no diseqc settings for (%s, %d, %s)",
                     channel.source, channel.frequency, pol)
        return False

    if f < IF_MIN or f > IF_MAX:
        logger.error("transponder (%s, %d, %s) (freq %d -> out of tuning range)",
                     channel.source, channel.frequency, pol, f)
        return False

    return True


def intermediate_frequencies(channels: Sequence[Channel], setup: LnbSetup) -> np.ndarray:
    """
    Intermediate frequencies for a list of satellite channels.

    Returns:
        Float array of IFs in MHz; NaN where no DiSEqC entry matches
    """
    freqs = np.array([c.frequency for c in channels], dtype=np.int64)
    while np.any(freqs > 999999):
        freqs = np.where(freqs > 999999, freqs // 1000, freqs)

    if setup.diseqc:
        lofs = np.full(len(freqs), np.nan)
        for i, (c, f) in enumerate(zip(channels, freqs)):
            d = setup.find_diseqc(c.source, int(f), c.params.polarization)
            if d is not None:
                lofs[i] = d.lof
    else:
        lofs = np.where(freqs < setup.slof, setup.lnb_lo, setup.lnb_hi)

    return (freqs - lofs).astype(np.float64)


def tunable_mask(channels: Sequence[Channel], setup: LnbSetup) -> np.ndarray:
    """Boolean array, True where the channel's IF lies within the tuner band."""
    ifs = intermediate_frequencies(channels, setup)
    return (ifs >= IF_MIN) & (ifs <= IF_MAX)
