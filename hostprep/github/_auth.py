# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
from typing import Collection

from hostprep import _console
from hostprep._core import Command
from hostprep._core import ProvisioningError
from hostprep.github._gh import GhCli
from hostprep.github._scopes import missing_scopes


class IdentityMismatch(ProvisioningError):
    pass


class ScopesNotGranted(ProvisioningError):
    pass


class EnsureGhAuth(Command):
    """Make the account active in gh with the required scopes.

    An account which is already logged in is never logged out.
    At most, it is switched to and its scopes are refreshed once.
    """

    def __init__(self, username: str, required_scopes: Collection[str], host: str = 'github.com'):
        self._username = username
        self._required_scopes = required_scopes
        self._host = host

    def __repr__(self):
        return f'{EnsureGhAuth.__name__}({self._username!r}, {self._required_scopes!r})'

    def run(self, shell):
        gh = GhCli(shell, self._host)
        accounts = {a.login.casefold(): a for a in gh.accounts()}
        account = accounts.get(self._username.casefold())
        if account is not None:
            _console.success(f"Account {self._username!r} is authenticated")
            if not account.active:
                _console.step(f"Switching to account {self._username!r}...")
                gh.switch(self._username)
                _console.success(f"Switched to account {self._username!r}")
            self._ensure_scopes(gh)
            _console.step("Setting git protocol to HTTPS...")
            gh.set_git_protocol('https')
            _console.success("Git protocol set to HTTPS")
        else:
            self._login(gh)
        _console.step("Setting up GitHub CLI as git credential helper...")
        gh.setup_git()
        _console.success("Git credential helper configured")

    def _ensure_scopes(self, gh: GhCli):
        _console.step(f"Checking GitHub CLI scopes for {self._username!r}...")
        missing = missing_scopes(gh.token_scopes(), self._required_scopes)
        if missing:
            _console.warning(f"Missing required scopes {', '.join(missing)}, refreshing authentication...")
            # gh auth refresh has no --user; it refreshes the active account.
            gh.switch_quietly(self._username)
            gh.refresh(self._required_scopes)
            missing = missing_scopes(gh.token_scopes(), self._required_scopes)
            if missing:
                raise ScopesNotGranted(f"Failed to obtain required scopes: {', '.join(missing)}")
        _console.success("GitHub CLI has required scopes")

    def _login(self, gh: GhCli):
        _console.step(f"Account {self._username!r} is not authenticated")
        _console.warning("A browser window will open for authentication (or use device code flow)")
        gh.login(self._required_scopes)
        logged_in = gh.current_login()
        _logger.info("Requested %r, logged in as %r", self._username, logged_in)
        if logged_in.casefold() != self._username.casefold():
            raise IdentityMismatch(
                f"Logged in as {logged_in!r} but expected {self._username!r}. "
                "Please run again and log in with the correct account")
        _console.success(f"GitHub CLI authentication successful for {self._username!r}")


_logger = logging.getLogger(__name__)
