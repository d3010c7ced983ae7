"""Tests for the interactive pager."""

from unittest.mock import MagicMock

import pytest

from netbox_cli.models import Page
from netbox_cli.pager import Pager

from .conftest import NETBOX_URL, make_page

NEXT_URL = f"{NETBOX_URL}/api/dcim/cables/?limit=1&offset=1"


def _cable(cable_id):
    return {"id": cable_id, "display": f"#{cable_id}", "type": "cat6"}


@pytest.fixture
def first_page():
    return Page.from_dict(make_page([_cable(1)], next_url=NEXT_URL, count=2))


@pytest.fixture
def second_page():
    return Page.from_dict(make_page([_cable(2)], count=2))


class TestPagerPrompting:
    def test_single_page_needs_no_prompt(self, mock_client, renderer, output, cables_endpoint):
        prompt = MagicMock()
        pager = Pager(mock_client, renderer, prompt=prompt)

        assert pager.run(cables_endpoint, Page.from_dict(make_page([_cable(1)]))) is True

        prompt.assert_not_called()
        mock_client.get_page.assert_not_called()
        assert "All Netbox cables objects have been successfully displayed..." in output()

    def test_yes_fetches_next_url(self, mock_client, renderer, output, cables_endpoint, first_page, second_page):
        mock_client.get_page.return_value = second_page
        pager = Pager(mock_client, renderer, prompt=MagicMock(return_value="yes"))

        assert pager.run(cables_endpoint, first_page) is True

        mock_client.get_page.assert_called_once_with(NEXT_URL)
        text = output()
        assert "Cable: #1" in text
        assert "Cable: #2" in text
        assert text.count("Total Cables: 2") == 1

    def test_no_stops_paging(self, mock_client, renderer, output, cables_endpoint, first_page):
        pager = Pager(mock_client, renderer, prompt=MagicMock(return_value="n"))

        assert pager.run(cables_endpoint, first_page) is False

        mock_client.get_page.assert_not_called()
        text = output()
        assert "Exiting the netbox-cli application..." in text
        assert "successfully displayed" not in text

    def test_invalid_answer_asks_again(self, mock_client, renderer, output, cables_endpoint, first_page, second_page):
        mock_client.get_page.return_value = second_page
        prompt = MagicMock(side_effect=["maybe", "", "Y"])
        pager = Pager(mock_client, renderer, prompt=prompt)

        assert pager.run(cables_endpoint, first_page) is True

        assert prompt.call_count == 3
        assert output().count("Invalid input") == 2

    def test_answers_are_case_insensitive(self, mock_client, renderer, cables_endpoint):
        pager = Pager(mock_client, renderer, prompt=MagicMock(side_effect=["YES", "No"]))
        assert pager.ask_continue(cables_endpoint) is True
        assert pager.ask_continue(cables_endpoint) is False

    def test_prompt_names_the_endpoint(self, mock_client, renderer, cables_endpoint, first_page):
        prompt = MagicMock(return_value="no")
        Pager(mock_client, renderer, prompt=prompt).run(cables_endpoint, first_page)
        (text,), _ = prompt.call_args
        assert "next page of cables objects" in text


class TestPagerAuto:
    def test_walks_every_page_without_prompting(self, mock_client, renderer, cables_endpoint, first_page):
        middle = Page.from_dict(make_page([_cable(2)], next_url=NEXT_URL + "x", count=3))
        last = Page.from_dict(make_page([_cable(3)], count=3))
        mock_client.get_page.side_effect = [middle, last]
        prompt = MagicMock()

        assert Pager(mock_client, renderer, prompt=prompt, auto=True).run(cables_endpoint, first_page) is True

        prompt.assert_not_called()
        assert [c.args[0] for c in mock_client.get_page.call_args_list] == [NEXT_URL, NEXT_URL + "x"]


class TestPagerEmpty:
    def test_empty_page(self, mock_client, renderer, output, cables_endpoint):
        assert Pager(mock_client, renderer).run(cables_endpoint, Page.from_dict(make_page([]))) is True
        assert "No cables found on server. Exiting..." in output()
