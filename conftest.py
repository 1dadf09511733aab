#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import os.path
import sys
import pytest


here = os.path.dirname(__file__)
sys.path.insert(0, here)


pytest.register_assert_rewrite("matching")


def pytest_addoption(parser):
    parser.addoption("--online", action="store_true", default=False, help="Run tests that fetch HMRC exchange rates")


@pytest.fixture(scope="session")
def online(request):
    return request.config.getoption("--online")
