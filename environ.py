#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import importlib.metadata
import os.path
import subprocess


# Currency that gains are reported and taxed in
home_currency: str = os.environ.get('CGTCALC_HOME_CURRENCY', 'GBP').upper()


def get_version() -> str:
    try:
        version = subprocess.check_output([
            'git',
                '-C', os.path.dirname(__file__),
            'show',
                '-s',
                '--date=format:%Y-%m-%d',
                '--format=%h (%cd)',
                'HEAD',
        ], text=True, stderr=subprocess.DEVNULL)
    except (FileNotFoundError, subprocess.CalledProcessError):
        # Not a checkout; fall back to the installed distribution
        try:
            version = importlib.metadata.version('schwab-cgtcalc')
        except importlib.metadata.PackageNotFoundError:
            version = 'unknown'
    else:
        version = version.rstrip()
    return version


version = get_version()
