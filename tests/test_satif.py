"""
Tests for the satellite intermediate frequency check.
"""

import logging

import numpy as np
import pytest
from dvbscan import (
    Channel, DiseqcEntry, LnbSetup, valid_sat_if, intermediate_frequency,
    intermediate_frequencies, tunable_mask,
)
from dvbscan.SatIF import source_matches, ROTOR_SOURCE


DISEQC_CONF = """\
# Astra 19.2E on port A, Hotbird 13E on port B
1 2:
S19.2E  11700 V  9750  t v W15 [E0 10 38 F0] W15 A W15 t
S19.2E  99999 V 10600  t V W15 [E0 10 38 F1] W15 A W15 T
S19.2E  11700 H  9750  t v W15 [E0 10 38 F2] W15 A W15 t
S19.2E  99999 H 10600  t V W15 [E0 10 38 F3] W15 A W15 T

S13E    11700 V  9750  t v W15 [E0 10 38 F4] W15 B W15 t   # low band only
"""


def sat(frequency, polarization='H', source='S19.2E') -> Channel:
    ch = Channel(source=source, frequency=frequency)
    ch.params.polarization = polarization
    return ch


@pytest.fixture
def diseqc_setup(tmp_path):
    path = tmp_path / 'diseqc.conf'
    path.write_text(DISEQC_CONF)
    return LnbSetup.load_diseqc(path)


class TestSourceMatches:
    """Test DiSEqC source matching."""

    def test_exact(self):
        """Identical sources match, different ones don't."""
        assert source_matches('S19.2E', 'S19.2E')
        assert not source_matches('S19.2E', 'S13E')

    def test_rotor(self):
        """The rotor source matches every satellite source."""
        assert source_matches(ROTOR_SOURCE, 'S19.2E')
        assert source_matches(ROTOR_SOURCE, 'S13E')
        assert not source_matches(ROTOR_SOURCE, 'T')
        assert not source_matches(ROTOR_SOURCE, '')


class TestFixedLnb:
    """Test the IF check with fixed LNB oscillators."""

    def test_high_band(self):
        """11727 MHz above the switch frequency uses 10600."""
        setup = LnbSetup(slof=11700, lnb_lo=9750, lnb_hi=10600)
        ch = sat(11727)
        assert intermediate_frequency(ch, setup) == 1127
        assert valid_sat_if(ch, setup)

    def test_low_band(self):
        """10714 MHz below the switch frequency uses 9750."""
        setup = LnbSetup()
        assert intermediate_frequency(sat(10714), setup) == 964
        assert valid_sat_if(sat(10714), setup)

    def test_switch_frequency_is_high_band(self):
        """The switch frequency itself belongs to the high band."""
        assert intermediate_frequency(sat(11700), LnbSetup()) == 1100

    def test_out_of_range(self, caplog):
        """An IF of 500 MHz is rejected and logged."""
        with caplog.at_level(logging.ERROR):
            assert not valid_sat_if(sat(10250), LnbSetup())
        assert 'freq 500 -> out of tuning range' in caplog.text
        assert 'S19.2E' in caplog.text

    def test_band_edges(self):
        """950 and 2150 MHz are inside, one MHz beyond is not."""
        setup = LnbSetup(slof=20000)
        assert valid_sat_if(sat(10700), setup)
        assert valid_sat_if(sat(11900), setup)
        assert not valid_sat_if(sat(10699), setup)
        assert not valid_sat_if(sat(11901), setup)

    def test_khz_and_hz(self):
        """kHz and Hz frequencies are reduced to MHz first."""
        setup = LnbSetup()
        assert intermediate_frequency(sat(11727000), setup) == 1127
        assert intermediate_frequency(sat(11727000000), setup) == 1127

    def test_record_unchanged(self):
        """The check does not touch the record."""
        ch = sat(11727000)
        valid_sat_if(ch, LnbSetup())
        assert ch.frequency == 11727000


class TestDiseqc:
    """Test the IF check with a DiSEqC table."""

    def test_load(self, diseqc_setup):
        """Comments, blank lines and device selections are skipped."""
        assert diseqc_setup.diseqc
        assert len(diseqc_setup.diseqcs) == 5
        first = diseqc_setup.diseqcs[0]
        assert first == DiseqcEntry('S19.2E', 11700, 'V', 9750,
                                    't v W15 [E0 10 38 F0] W15 A W15 t')

    def test_load_kwargs(self, tmp_path):
        """Further setup fields can be passed along."""
        path = tmp_path / 'diseqc.conf'
        path.write_text(DISEQC_CONF)
        setup = LnbSetup.load_diseqc(path, slof=12000)
        assert setup.slof == 12000

    def test_load_malformed(self, tmp_path):
        """A bad entry names its line."""
        path = tmp_path / 'diseqc.conf'
        path.write_text("# comment\nS19.2E 11700 V 9750 t\nS19.2E 11700 V\n")
        with pytest.raises(ValueError, match=r':3:'):
            LnbSetup.load_diseqc(path)

    def test_high_band(self, diseqc_setup):
        """The first entry with a higher SLOF and same polarization is used."""
        assert intermediate_frequency(sat(11727, 'H'), diseqc_setup) == 1127
        assert valid_sat_if(sat(11727, 'H'), diseqc_setup)

    def test_low_band(self, diseqc_setup):
        """Low band transponders hit the 11700 entry."""
        assert intermediate_frequency(sat(10744, 'V'), diseqc_setup) == 994

    def test_table_order(self):
        """The first matching entry wins."""
        setup = LnbSetup(diseqc=True, diseqcs=[
            DiseqcEntry('S19.2E', 99999, 'H', 10000),
            DiseqcEntry('S19.2E', 99999, 'H', 10600),
        ])
        assert intermediate_frequency(sat(11727), setup) == 1727

    def test_no_entry(self, diseqc_setup, caplog):
        """A transponder without matching entry is rejected and logged."""
        with caplog.at_level(logging.ERROR):
            assert not valid_sat_if(sat(11727, 'H', 'S13E'), diseqc_setup)
        assert 'no diseqc settings for (S13E, 11727, H)' in caplog.text
        assert intermediate_frequency(sat(11727, 'H', 'S13E'), diseqc_setup) is None

    def test_no_polarization(self, diseqc_setup):
        """Without polarization no entry matches."""
        assert not valid_sat_if(sat(11727, None), diseqc_setup)

    def test_rotor(self):
        """A rotor entry serves every satellite."""
        setup = LnbSetup(diseqc=True, diseqcs=[
            DiseqcEntry(ROTOR_SOURCE, 99999, 'H', 10600),
        ])
        assert valid_sat_if(sat(11727, 'H', 'S13E'), setup)
        assert valid_sat_if(sat(11727, 'H', 'S28.2E'), setup)

    def test_ignores_fixed_oscillators(self):
        """With DiSEqC on, the fixed oscillators are not used."""
        setup = LnbSetup(diseqc=True, diseqcs=[])
        assert setup.lof('S19.2E', 11727, 'H') is None


class TestDiseqcEntry:
    """Test diseqc.conf line parsing."""

    def test_without_commands(self):
        """The command sequence is optional."""
        d = DiseqcEntry.from_line('S19.2E 11700 h 9750')
        assert d == DiseqcEntry('S19.2E', 11700, 'H', 9750, '')

    @pytest.mark.parametrize('line', [
        'S19.2E 11700 V',
        'S19.2E abc V 9750',
        'S19.2E 11700 X 9750',
        'S19.2E 11700 HV 9750',
        'S19.2E 11700 V 97.5',
    ])
    def test_malformed(self, line):
        """Malformed entries raise ValueError."""
        with pytest.raises(ValueError):
            DiseqcEntry.from_line(line)


class TestBatch:
    """Test IF calculation for channel lists."""

    def test_fixed_lnb(self):
        """IFs and tunable flags for a mixed list."""
        channels = [sat(11727), sat(10714, 'V'), sat(10250), sat(12750000, 'V')]
        setup = LnbSetup()
        np.testing.assert_array_equal(
            intermediate_frequencies(channels, setup), [1127, 964, 500, 2150])
        np.testing.assert_array_equal(
            tunable_mask(channels, setup), [True, True, False, True])

    def test_matches_single(self, diseqc_setup):
        """The batch result agrees with the single channel check."""
        channels = [sat(11727, 'H'), sat(10744, 'V'), sat(11727, 'H', 'S13E'),
                    sat(10744, 'V', 'S13E'), sat(12500, None)]
        mask = tunable_mask(channels, diseqc_setup)
        assert list(mask) == [valid_sat_if(c, diseqc_setup) for c in channels]

    def test_no_entry_is_nan(self, diseqc_setup):
        """Channels without DiSEqC entry get NaN."""
        ifs = intermediate_frequencies([sat(11727, 'H', 'S13E')], diseqc_setup)
        assert np.isnan(ifs[0])
        assert not tunable_mask([sat(11727, 'H', 'S13E')], diseqc_setup)[0]

    def test_empty(self):
        """An empty list gives empty arrays."""
        assert intermediate_frequencies([], LnbSetup()).shape == (0,)
        assert tunable_mask([], LnbSetup()).shape == (0,)
