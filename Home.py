#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import datetime
import io
import logging
import os.path

import streamlit as st
import streamlit.components.v1 as components

from decimal import Decimal

import trades

from cgtcalc import calculate
from currency import RateSource, FixedRates, HmrcRates
from errors import CalculationError
from gains import Config, TaxpayerStatus
from ledger import Ledger
from report import Report, HtmlReport, TextReport


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(name)s %(levelname)s %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    force=True,
)


# https://docs.streamlit.io/library/api-reference/utilities/st.set_page_config
st.set_page_config(
    page_title="Share Sale CGT Calculator",
    page_icon=":material/savings:",
    layout="wide",
)


st.title('Share Sale CGT Calculator')


st.markdown('''This estimates the UK Capital Gains Tax due on selling shares of a single company.

Shares are identified with acquisitions in the 30 days after the sale first (bed & breakfast rule), and then with the Section 104 holding.
Same-day acquisitions are not matched specially.
''')


#
# Parameters
#

with st.sidebar:
    st.header("Parameters")

    symbol = st.text_input('Symbol', value='GOOG', key='symbol')

    sell_date = st.date_input('Sell date', value=datetime.date.today(), key='sell_date')

    shares_to_sell = st.number_input('Shares to sell', min_value=0.0, value=10.0, step=1.0, key='shares_to_sell')

    sale_price = st.number_input('Sale price per share', min_value=0.0, value=100.0, key='sale_price')

    sale_currency = st.selectbox('Currency', ['USD', 'EUR', 'GBP'], key='sale_currency')

    rates_source = st.selectbox('Exchange rates', ['Fixed', 'HMRC monthly'], key='rates_source')

    exchange_rate = st.number_input('Exchange rate (£ per unit)', min_value=0.0, value=0.8, format='%.4f', key='exchange_rate', disabled=rates_source != 'Fixed')

    taxpayer_status = st.radio('Taxpayer status', ['Basic', 'Higher'], index=1, key='taxpayer_status', horizontal=True)

    allowance = st.number_input('Annual exempt amount', min_value=0, value=None, step=100, key='allowance', help='Leave empty for the amount of the tax year.')

    format_ = st.selectbox('Format', ['HTML', 'Text'], key='format')


#
# Inputs
#

st.html("<style>textarea { font-family: monospace !important; font-size: 14px !important; }</style>")

placeholder_filename = os.path.join(os.path.dirname(__file__), 'tests', 'data', 'trades.tsv')
transactions = st.text_area(
    label="Transactions",
    key='transactions',
    height=14*20,
    placeholder=open(placeholder_filename, 'rt').read(),
    help='One trade per line: `BUY|SELL DD/MM/YYYY SYMBOL SHARES PRICE [CURRENCY]`',
)


#
# Calculation
#

if transactions:
    stream = io.StringIO(transactions)
else:
    stream = open(placeholder_filename, 'rt')

rate_source: RateSource
if rates_source == 'Fixed':
    rate_source = FixedRates({sale_currency: Decimal(str(exchange_rate))})
else:
    rate_source = HmrcRates()

try:
    config = Config.for_date(
        sell_date,
        annual_allowance=None if allowance is None else Decimal(allowance),
    )
    ledger = Ledger.for_symbol(symbol, trades.parse(stream, currency=sale_currency))
    result = calculate(
        ledger,
        sell_date,
        Decimal(str(shares_to_sell)),
        Decimal(str(sale_price)),
        sale_currency,
        TaxpayerStatus[taxpayer_status.upper()],
        config,
        rate_source,
    )
except (CalculationError, ValueError, NotImplementedError) as ex:
    st.error(str(ex), icon="🚨")
    st.stop()

report:Report
with st.container(border=True):
    if format_ == 'HTML':
        html = io.StringIO()
        report = HtmlReport(html)
        result.write(report)
        components.html(html.getvalue(), height=768, scrolling=True)
    else:
        assert format_ == 'Text'
        text = io.StringIO()
        report = TextReport(text)
        result.write(report)
        st.markdown('```\n' + text.getvalue() + '```\n')
