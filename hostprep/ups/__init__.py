# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""NUT (Network UPS Tools) as a network server or client.

Run as root: python -m hostprep.ups server|client [--host HOST]

The server drives the UPS hardware and serves its status on port 3493.
A client only monitors a remote server and shuts its machine down
when the server says so.
"""
