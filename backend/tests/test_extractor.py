import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from balance_tracker.models.balance import ExtractionStatus
from balance_tracker.utils.errors import BrowserLaunchError, ExtractionError, InvalidAddressError

from conftest import ADDRESS_A, FakePage


def test_reads_balance_and_percentage(make_extractor):
    page = FakePage(balance_texts=["$1,234+3.2%"], percentage=" +3.2% ")
    extractor, sessions = make_extractor(page)

    result = asyncio.run(extractor.fetch_balance(ADDRESS_A))

    assert result.status == ExtractionStatus.SUCCESS
    assert result.balance == "$1,234"
    assert result.percentage_change == "+3.2%"
    assert page.visited == [(f"https://debank.com/profile/{ADDRESS_A}", "domcontentloaded")]
    assert len(sessions) == 1 and sessions[0].closed


def test_polls_past_placeholder_until_real_balance(make_extractor):
    page = FakePage(balance_texts=["$0", "$0", "$0", "$5,678"])
    extractor, _ = make_extractor(page)

    result = asyncio.run(extractor.fetch_balance(ADDRESS_A))

    assert result.balance == "$5,678"
    assert page.reads == 4


def test_balance_stuck_at_zero_is_accepted_after_poll_window(make_extractor):
    page = FakePage(balance_texts=["$0"])
    extractor, sessions = make_extractor(page)

    result = asyncio.run(extractor.fetch_balance(ADDRESS_A))

    assert result.status == ExtractionStatus.SUCCESS
    assert result.balance == "$0"
    assert page.reads > 1
    assert sessions[0].closed


def test_element_missing_while_polling_reads_as_zero(make_extractor):
    page = FakePage(balance_texts=["$42"], element_missing_reads=2)
    extractor, _ = make_extractor(page)

    result = asyncio.run(extractor.fetch_balance(ADDRESS_A))

    assert result.balance == "$42"


def test_missing_balance_element_fails_extraction(make_extractor):
    page = FakePage(selector_appears=False)
    extractor, sessions = make_extractor(page)

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(extractor.fetch_balance(ADDRESS_A))

    assert excinfo.value.address == ADDRESS_A
    assert "Timed out" in str(excinfo.value)
    assert sessions[0].closed


def test_navigation_error_fails_extraction(make_extractor):
    page = FakePage(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
    extractor, sessions = make_extractor(page)

    with pytest.raises(ExtractionError):
        asyncio.run(extractor.fetch_balance(ADDRESS_A))
    assert sessions[0].closed


def test_extract_converts_failure_to_failed_result(make_extractor):
    extractor, sessions = make_extractor(FakePage(selector_appears=False))

    result = asyncio.run(extractor.extract(ADDRESS_A))

    assert result.status == ExtractionStatus.FAILED
    assert result.balance is None
    assert result.percentage_change is None
    assert result.error
    assert sessions[0].closed


def test_missing_percentage_is_not_a_failure(make_extractor):
    extractor, _ = make_extractor(FakePage(balance_texts=["$10"], percentage=None))

    result = asyncio.run(extractor.fetch_balance(ADDRESS_A))

    assert result.status == ExtractionStatus.SUCCESS
    assert result.balance == "$10"
    assert result.percentage_change is None


def test_empty_percentage_reads_as_zero_percent(make_extractor):
    extractor, _ = make_extractor(FakePage(balance_texts=["$10"], percentage="  "))

    result = asyncio.run(extractor.fetch_balance(ADDRESS_A))

    assert result.percentage_change == "0%"


def test_invalid_address_never_opens_a_browser(make_extractor):
    extractor, sessions = make_extractor(FakePage())

    with pytest.raises(InvalidAddressError):
        asyncio.run(extractor.fetch_balance("not-an-address"))
    assert sessions == []


def test_browser_launch_failure_propagates(make_extractor):
    extractor, sessions = make_extractor(
        FakePage(),
        enter_error=BrowserLaunchError("Browser failed to start: no executable")
    )

    with pytest.raises(BrowserLaunchError):
        asyncio.run(extractor.fetch_balance(ADDRESS_A))

    # Not a failure of this address, so extract does not swallow it either
    with pytest.raises(BrowserLaunchError):
        asyncio.run(extractor.extract(ADDRESS_A))


def test_profile_url_uses_template(make_extractor, fast_settings):
    fast_settings.profile_url_template = "https://example.test/u/{address}?tab=wallet"
    extractor, _ = make_extractor(FakePage())

    assert extractor.profile_url(ADDRESS_A) == f"https://example.test/u/{ADDRESS_A}?tab=wallet"
