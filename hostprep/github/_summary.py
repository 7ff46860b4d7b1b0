# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import re
from typing import Optional

from hostprep import _console
from hostprep._pubkey import HomePubKey
from hostprep.github._gh import GhCli

_git_keys_re = re.compile(r'^user\.|^commit\.gpgsign|^tag\.gpgsign|^gpg\.|^credential\.', re.IGNORECASE)

_SWITCH_TO_SSH = (
    "url=$(git remote get-url origin | sed 's|https://github.com/|git@github.com:|') "
    '&& git remote set-url origin "$url" && git remote set-url --push origin "$url"')


def print_summary(shell, settings: 'GithubSettings', gpg_key_id: Optional[str], host: str = 'github.com'):
    _console.note("Git Global Configuration:")
    r = shell.run_still(['git', 'config', '--global', '--list'])
    for line in r.stdout.splitlines():
        if _git_keys_re.search(line):
            print(f"  {line}")
    print()
    _console.note("SSH Key:")
    _console.detail("Private:", str(settings.ssh_key_path()))
    _console.detail("Public:", str(settings.ssh_pub_key_path()))
    try:
        fingerprint = HomePubKey(settings.ssh_key_name, settings.home).fingerprint()
    except (OSError, ValueError):
        fingerprint = "unknown"
    _console.detail("Fingerprint:", fingerprint)
    print()
    _console.note("GPG Key:")
    _console.detail("Key ID:", gpg_key_id or "none")
    print()
    _console.note("GitHub CLI:")
    _console.detail("Account:", settings.username)
    for account in GhCli(shell, host).accounts():
        if account.login.casefold() == settings.username.casefold():
            _console.detail("Active:", str(account.active).lower())
            _console.detail("Git protocol:", account.protocol or "unknown")
            _console.detail("Token scopes:", ', '.join(account.scopes))
    print()
    _console.success("Setup complete!")
    _console.header("Git Authentication Options")
    print("  HTTPS (default, recommended):")
    print("    Git push/pull uses GitHub CLI automatically")
    print()
    print("  SSH (alternative):")
    print("    To switch a repo from HTTPS to SSH, run:")
    print(f"    {_SWITCH_TO_SSH}")
    _console.header("Next Steps")
    print("  1. Your commits will now be signed automatically")
    print("  2. You'll see a 'Verified' badge on GitHub commits")
    print()
    if settings.platform.is_linux():
        _console.warning("Run 'source ~/.bashrc' or 'source ~/.zshrc' to enable GPG_TTY in your current terminal session.")
        print()
    print("  To test, make a commit and check it on GitHub:")
    print("    git commit --allow-empty -m 'Test signed commit'")
    print("    git log --show-signature -1")
    _console.header("SSO Configuration (if using SSH with organization repos)")
    print("  If your organization uses SAML SSO and you want to use SSH,")
    print("  you need to authorize your SSH key for SSO access:")
    print()
    print(f"  1. Go to: https://{host}/settings/keys")
    print("  2. Find your SSH key and click 'Configure SSO'")
    print("  3. Authorize it for your organization")
    print()
    print("  Note: HTTPS authentication (default) does not require SSO setup.")
    print()
