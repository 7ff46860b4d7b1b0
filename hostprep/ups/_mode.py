# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
from argparse import ArgumentParser
from typing import NamedTuple
from typing import Optional
from typing import Sequence

from hostprep._prompt import InvalidInput

NETSERVER = 'netserver'
NETCLIENT = 'netclient'


class UpsMode(NamedTuple):
    """All mode-dependent values; every generated file is rendered from one of these."""

    nut_mode: str
    server_host: str
    monitor_role: str
    user: str
    password: str

    @classmethod
    def server(cls, host: Optional[str] = None) -> 'UpsMode':
        """Serve the UPS attached to this machine. The host is always localhost.

        >>> UpsMode.server('10.0.0.5') == UpsMode.server()
        True
        """
        return cls(NETSERVER, 'localhost', 'master', 'upsadmin', 'upsadmin')

    @classmethod
    def client(cls, host: Optional[str]) -> 'UpsMode':
        """Monitor the UPS served by the host.

        >>> UpsMode.client('nas.lan').server_host
        'nas.lan'
        >>> UpsMode.client(None)
        Traceback (most recent call last):
        ...
        hostprep._prompt.InvalidInput: --host is required for client mode
        """
        if not host:
            raise InvalidInput("--host is required for client mode")
        return cls(NETCLIENT, host, 'slave', 'upsuser', 'upsuser')

    def is_server(self) -> bool:
        return self.nut_mode == NETSERVER


def parse_args(argv: Sequence[str]) -> UpsMode:
    parser = ArgumentParser(
        prog='hostprep-ups',
        description="configure this machine as a NUT netserver or netclient",
        epilog=(
            "server mode always configures localhost (ignores --host); "
            "client mode requires --host"),
        )
    parser.add_argument('mode', choices=['server', 'client'])
    parser.add_argument('--host', help="address of the NUT server, required for client mode")
    args = parser.parse_args(argv)
    if args.mode == 'server':
        return UpsMode.server(args.host)
    try:
        return UpsMode.client(args.host)
    except InvalidInput as e:
        parser.error(str(e))
