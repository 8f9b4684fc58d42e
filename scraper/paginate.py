"""
scraper/paginate.py
Expands the lazily loaded beer list by clicking "Show More" until nothing new
appears. The page has no reliable end-of-list marker, so the loop stops when
the control disappears or the number of beer cards stops growing.
"""
SHOW_MORE_LABEL = "Show More"
ITEM_SEL = '.beer-item'
SETTLE_SECONDS = 1.0


def find_show_more(link_texts: list[str], label: str = SHOW_MORE_LABEL) -> int | None:
    """Index of the first link whose visible text contains label, else None."""
    for i, text in enumerate(link_texts):
        if text and label in text:
            return i
    return None


def has_converged(previous: int, current: int) -> bool:
    return current == previous


class PageSurface:
    """The few page operations the expansion loop needs, over a Playwright page."""

    def __init__(self, page, settle_seconds: float = SETTLE_SECONDS):
        self.page = page
        self.settle_seconds = settle_seconds

    async def settle(self) -> None:
        await self.page.wait_for_timeout(self.settle_seconds * 1000)

    async def scroll_to_bottom(self) -> None:
        await self.page.evaluate("window.scrollTo(0, document.body.scrollHeight)")

    async def link_texts(self) -> list[str]:
        return await self.page.eval_on_selector_all('a', 'els => els.map(e => e.innerText || "")')

    async def activate_link(self, index: int) -> None:
        link = self.page.locator('a').nth(index)
        await link.scroll_into_view_if_needed()
        await self.settle()
        await link.click()

    async def item_count(self) -> int:
        return await self.page.locator(ITEM_SEL).count()


async def expand_all(surface, label: str = SHOW_MORE_LABEL, max_rounds: int | None = None) -> int:
    """Keep activating the expansion control until the list stops growing.

    Returns how many times the control was clicked.
    """
    previous = 0
    clicks = 0
    while max_rounds is None or clicks < max_rounds:
        await surface.scroll_to_bottom()
        await surface.settle()

        index = find_show_more(await surface.link_texts(), label)
        if index is None:
            print("No more beers to load.")
            break

        print(f"Clicking '{label}' button...")
        await surface.activate_link(index)
        await surface.settle()
        clicks += 1

        current = await surface.item_count()
        if has_converged(previous, current):
            print(f"  Beer count stuck at {current}, stopping.")
            break
        previous = current
    return clicks
