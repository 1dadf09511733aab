#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import io
import os.path

import pytest

from datetime import date
from decimal import Decimal

from ledger import Kind, Transaction
from schwab import parse_equity_details


data_dir = os.path.join(os.path.dirname(__file__), 'data')


def test_parse():
    transactions = parse_equity_details(open(os.path.join(data_dir, 'EquityAwardsCenter_EquityDetails.csv'), 'rt', newline=''))

    # The 25 May 2022 lot has nothing available to sell
    assert len(transactions) == 3
    assert transactions[0] == Transaction(
        symbol='GOOG',
        kind=Kind.ACQUISITION,
        date=date(2021, 11, 25),
        quantity=Decimal('42.42'),
        unit_price=Decimal('147.00'),
        currency='USD',
    )
    assert transactions[-1] == Transaction(
        symbol='GOOG',
        kind=Kind.ACQUISITION,
        date=date(2022, 8, 25),
        quantity=Decimal('10.351'),
        unit_price=Decimal('117.10'),
        currency='USD',
    )


def test_parse_outside_section():
    stream = io.StringIO(
        '"Date","Symbol"\n'
        '"02-01-2021","GOOG"\n'
    )
    assert parse_equity_details(stream) == []


def test_parse_unexpected_header():
    stream = io.StringIO(
        '"*** EQUITY AWARD SHARES ***"\n'
        '"Award Date","Symbol","Award ID"\n'
    )
    with pytest.raises(ValueError):
        parse_equity_details(stream)
