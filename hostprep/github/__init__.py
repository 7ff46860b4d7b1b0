# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""GitHub CLI authentication, SSH key and GPG commit signing setup.

Run as: python -m hostprep.github

The procedure is interactive and takes no flags. It can be re-run at any
time: what is already in place is reused, and keys that GitHub already has
are not uploaded again.
"""
