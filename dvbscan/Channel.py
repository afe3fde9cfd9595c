"""
Channel Record

One channel (service) on one transponder, as kept in a VDR channels.conf.
A channel line has 13 colon separated fields:

    Name[,Shortname][;Provider]     Channel, short and provider names
    Frequency                       MHz (satellite), kHz or Hz otherwise
    Parameters                      Transponder parameter string (see Params)
    Source                          'S19.2E', 'C', 'T', 'A', ...
    Symbolrate                      kSym/s
    VPID[+PCR][=VTYPE]              Video PID, PCR PID if different, stream type
    APID[=lang][@type],...[;DPID..] Audio PIDs, then Dolby/data PIDs
    TPID                            Teletext PID
    CAID,...                        Conditional access system ids, hexadecimal
    SID:NID:TID:RID                 Service, network, transport stream, radio id

An empty PID or CA list is written as a single '0'.

Example:
    Das Erste HD;ARD:11494:HC23M5O35P0S1:S19.2E:22000:5101=27:5102=deu@3,5103=mis@3;5106=deu@106:5104:0:10301:1:1019:0
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from . import SOURCE_TYPES
from .Params import TransponderParams
from .units import normalize_frequency, float_to_str


logger = logging.getLogger(__name__)

NUM_FIELDS = 13

VPID_RE = re.compile(r'^(?P<pid>\d+)(\+(?P<pcr>\d+))?(=(?P<type>\d+))?$')
PID_ENTRY_RE = re.compile(r'^(?P<pid>\d+)(=(?P<lang>[^@]*))?(@(?P<type>\d+))?$')


@dataclass
class Pid:
    """
    Elementary stream entry.

    Attributes:
        pid: Packet identifier
        type: Stream type (0 = not given)
        lang: ISO 639 language code(s), may be empty
    """
    pid: int = 0
    type: int = 0
    lang: str = ''

    def __str__(self) -> str:
        s = str(self.pid)
        if self.lang:
            s += '=' + self.lang
        if self.type:
            s += '@' + str(self.type)
        return s


def _int(value: str, what: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"invalid {what}: '{value}'") from None


def _parse_pid_list(text: str, what: str) -> List[Pid]:
    pids = []
    if not text or text == '0':
        return pids
    for entry in text.split(','):
        m = PID_ENTRY_RE.match(entry)
        if not m:
            raise ValueError(f"invalid {what} entry: '{entry}'")
        pids.append(Pid(
            pid=int(m.group('pid')),
            type=int(m.group('type') or 0),
            lang=m.group('lang') or '',
        ))
    return pids


def _format_pid_list(pids: List[Pid]) -> str:
    return ','.join(str(p) for p in pids)


@dataclass
class Channel:
    """
    Internal channel representation.

    The tuning parameters live in an embedded TransponderParams. The scan
    bookkeeping flags (reported, tunable, tested) belong to the scanner and
    are never touched by the serializer.

    Example:
        >>> ch = Channel(name='ZDF', source='S19.2E', frequency=11954,
        ...              symbolrate=27500, sid=28006)
        >>> ch.params.polarization = 'H'
        >>> ch.params.fec = 34
        >>> ch.to_line()
        'ZDF:11954:HC34M2S0:S19.2E:27500:0:0:0:0:28006:0:0:0'
    """

    name: str = '???'
    short_name: str = ''
    provider: str = ''
    source: str = ''
    frequency: int = 0
    symbolrate: int = 0
    params: TransponderParams = field(default_factory=TransponderParams)

    vpid: Pid = field(default_factory=Pid)
    pcr: int = 0
    tpid: int = 0
    apids: List[Pid] = field(default_factory=list)
    dpids: List[Pid] = field(default_factory=list)
    spids: List[Pid] = field(default_factory=list)
    caids: List[int] = field(default_factory=list)

    sid: int = 0
    onid: int = 0
    nid: int = 0
    tid: int = 0
    rid: int = 0

    free_ca_mode: int = 0
    service_type: int = 0xFFFF
    orbital_pos: int = 0

    reported: bool = False
    tunable: bool = False
    tested: bool = False

    @property
    def source_type(self) -> str:
        """Delivery system tag, the first character of the source."""
        return self.source[:1]

    @property
    def is_satellite(self) -> bool:
        return self.source_type == 'S'

    def copy_transponder_data(self, other: Optional['Channel']) -> None:
        """
        Take over frequency, source, symbol rate and all tuning parameters.

        Used to propagate tuning data from a master transponder list to the
        channels found on it. Does nothing if `other` is None.
        """
        if other is None:
            return
        self.frequency = other.frequency
        self.source = other.source
        self.symbolrate = other.symbolrate
        self.params = other.params.copy()

    def params_string(self) -> str:
        """Parameter string for this channel's delivery system ('' without source)."""
        if not self.source:
            return ''
        return self.params.to_string(self.source_type)

    def print_transponder(self) -> str:
        """
        Short transponder description for logs and status displays.

        Returns:
            e.g. 'S2 11494.00 MHz SR 22000 HC23M5O35S1'
        """
        source = self.source_type
        dest = SOURCE_TYPES.get(source, '')
        dest += '2' if self.params.delsys == 1 else ' '

        f = normalize_frequency(self.frequency)
        dest += ' ' + float_to_str(f if source == 'S' else f / 1000.0, 8, 2) + ' MHz '

        if source in ('C', 'S'):
            dest += f"SR {normalize_frequency(self.symbolrate)} "

        return dest + self.params_string()

    def to_line(self, subtitles: bool = False) -> str:
        """
        Serialize to a channels.conf line.

        Subtitle PIDs are not part of the plain line. With `subtitles` they
        follow the teletext PID after a ';', the form from_line reads.

        Args:
            subtitles: Append subtitle PIDs to the teletext field

        Returns:
            Channel line without trailing newline
        """
        line = self.name or 'NULL'
        if self.short_name:
            line += ',' + self.short_name
        if self.provider:
            line += ';' + self.provider

        line += (f":{self.frequency}:{self.params_string()}:{self.source}"
                 f":{self.symbolrate}:{self.vpid.pid}")

        if self.pcr and self.pcr != self.vpid.pid:
            line += f"+{self.pcr}"
        if self.vpid.type:
            line += f"={self.vpid.type}"

        line += ':' + (_format_pid_list(self.apids) if self.apids else '0')
        if self.dpids:
            line += ';' + _format_pid_list(self.dpids)

        line += f":{self.tpid}"
        if subtitles and self.spids:
            line += ';' + _format_pid_list(self.spids)

        line += ':'
        line += ','.join(f"{ca:x}" for ca in self.caids) if self.caids else '0'
        line += f":{self.sid}:{self.onid}:{self.tid}:{self.rid}"
        return line

    @classmethod
    def from_line(cls, line: str) -> 'Channel':
        """
        Parse a channels.conf line.

        The teletext field may carry subtitle PIDs after a ';'
        ('TPID;SPID=lang,...'). The network id field sets both nid and onid.
        A missing PCR PID defaults to the video PID.

        Args:
            line: One channel line

        Returns:
            Parsed Channel

        Raises:
            ValueError: If the line is a group separator or malformed
        """
        line = line.rstrip('\r\n')
        if not line or line.startswith(':'):
            raise ValueError("not a channel line")

        parts = line.split(':')
        if len(parts) != NUM_FIELDS:
            raise ValueError(f"expected {NUM_FIELDS} fields, got {len(parts)}")

        (names, frequency, params, source, symbolrate, vpid, apids,
         tpid, caids, sid, nid, tid, rid) = parts

        names, _, provider = names.partition(';')
        name, _, short_name = names.partition(',')

        if not source:
            raise ValueError("missing source")

        m = VPID_RE.match(vpid)
        if not m:
            raise ValueError(f"invalid video PID: '{vpid}'")
        video = Pid(pid=int(m.group('pid')), type=int(m.group('type') or 0))
        pcr = int(m.group('pcr')) if m.group('pcr') else video.pid

        audio, _, data = apids.partition(';')
        teletext, _, subtitles = tpid.partition(';')

        if caids and caids != '0':
            try:
                ca_list = [int(ca, 16) for ca in caids.split(',')]
            except ValueError:
                raise ValueError(f"invalid CA list: '{caids}'") from None
        else:
            ca_list = []

        network = _int(nid, 'network id')
        channel = cls(
            name=name,
            short_name=short_name,
            provider=provider,
            source=source,
            frequency=_int(frequency, 'frequency'),
            symbolrate=_int(symbolrate, 'symbol rate'),
            params=TransponderParams.from_string(params),
            vpid=video,
            pcr=pcr,
            tpid=_int(teletext, 'teletext PID'),
            apids=_parse_pid_list(audio, 'audio PID'),
            dpids=_parse_pid_list(data, 'data PID'),
            spids=_parse_pid_list(subtitles, 'subtitle PID'),
            caids=ca_list,
            sid=_int(sid, 'service id'),
            onid=network,
            nid=network,
            tid=_int(tid, 'transport stream id'),
            rid=_int(rid, 'radio id'),
        )
        logger.debug("parsed channel %s (%s)", channel.name, channel.print_transponder())
        return channel

    def __str__(self) -> str:
        return self.to_line()
