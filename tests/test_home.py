#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import os.path

import pytest

from datetime import date

try:
    from streamlit.testing.v1 import AppTest
except ImportError:
    pytest.skip("No Streamlit; skipping.", allow_module_level=True)


root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

default_timeout = 10


@pytest.fixture(scope="function")
def at():
    at = AppTest.from_file(os.path.join(root_dir, 'Home.py'), default_timeout=default_timeout)
    at.run()
    assert not at.exception
    assert not at.error
    return at


def text_report(at):
    for md in at.markdown:
        assert isinstance(md.value, str)
        if md.value.startswith('```\n') and md.value.endswith('```'):
            return md.value[4: -3]
    return None


def test_run(at):
    # Ensure no state corruption
    at.run()
    assert not at.exception


def test_calculation(at):
    at.date_input(key='sell_date').set_value(date(2022, 9, 1))
    at.number_input(key='shares_to_sell').set_value(40.0)
    at.number_input(key='sale_price').set_value(300.0)
    at.number_input(key='exchange_rate').set_value(0.8)
    at.number_input(key='allowance').set_value(0)
    at.radio(key='taxpayer_status').set_value('Higher')
    at.selectbox(key='format').select('Text')
    at.run()
    assert not at.exception
    assert not at.error

    text = text_report(at)
    assert text is not None
    assert 'CGT due: £1,089.03' in text


def test_insufficient_shares(at):
    at.date_input(key='sell_date').set_value(date(2022, 9, 1))
    at.number_input(key='shares_to_sell').set_value(1000.0)
    at.run()
    assert not at.exception
    assert at.error
    assert at.error[0].value.startswith('Insufficient shares: held 130, requested 1000')


def test_transactions(at):
    transactions = at.text_area(key='transactions')
    transactions.set_value('BUY 01/01/2021 GOOG 100 50\n')
    at.date_input(key='sell_date').set_value(date(2021, 6, 1))
    at.number_input(key='shares_to_sell').set_value(50.0)
    at.number_input(key='sale_price').set_value(80.0)
    at.number_input(key='exchange_rate').set_value(1.0)
    at.number_input(key='allowance').set_value(0)
    at.radio(key='taxpayer_status').set_value('Higher')
    at.selectbox(key='format').select('Text')
    at.run()
    assert not at.exception
    assert not at.error

    text = text_report(at)
    assert text is not None
    # 2021/2022 higher rate is 20%
    assert 'CGT due: £300.00' in text
