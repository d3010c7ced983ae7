import logging
from typing import Callable, Optional

import click

from .models import Endpoint, Page
from .netbox_client import NetBoxClient
from .renderer import Renderer

logger = logging.getLogger(__name__)

YES_ANSWERS = {"y", "yes"}
NO_ANSWERS = {"n", "no"}


def _click_prompt(text: str) -> str:
    return click.prompt(text, default="", show_default=False, prompt_suffix=": ")


class Pager:
    """
    Walks a paginated list response.

    After each page that carries a `next` cursor the user is asked whether to
    continue; with auto=True every page is fetched without asking.
    """

    def __init__(
        self,
        client: NetBoxClient,
        renderer: Renderer,
        prompt: Optional[Callable[[str], str]] = None,
        auto: bool = False,
    ):
        self.client = client
        self.renderer = renderer
        self.prompt = prompt or _click_prompt
        self.auto = auto

    def ask_continue(self, endpoint: Endpoint) -> bool:
        text = self.renderer.continue_prompt(endpoint)
        while True:
            answer = (self.prompt(text) or "").strip().lower()
            if answer in YES_ANSWERS:
                return True
            if answer in NO_ANSWERS:
                return False
            self.renderer.invalid_input()

    def run(self, endpoint: Endpoint, page: Page) -> bool:
        """
        Render `page` and every following page the user asks for.

        Returns True when all pages were displayed, False when the user stopped early.
        """
        if not page.results:
            self.renderer.empty(endpoint)
            return True

        self.renderer.page_header(endpoint, page.count)
        self.renderer.render_results(endpoint, page.results)
        pages = 1

        while page.has_next:
            if not self.auto and not self.ask_continue(endpoint):
                logger.info("Stopped paging %s after %s page(s)", endpoint.path, pages)
                self.renderer.exiting()
                return False

            self.renderer.request_line("GET", page.next)
            page = self.client.get_page(page.next)
            self.renderer.render_results(endpoint, page.results)
            pages += 1

        logger.debug("Displayed %s page(s) of %s", pages, endpoint.path)
        self.renderer.all_displayed(endpoint)
        return True
