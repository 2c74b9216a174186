from __future__ import annotations

from catalog_browser.domain.title import Page, ResultRecord


class ResultAggregator:
    """
    Merge successive pages into one ordered, deduplicated result list.

    Rules:
    - Page 1 replaces the aggregate outright (new query or retry)
    - Later pages append only records whose id is not present yet,
      preserving arrival order
    - Identity is the record id; no other field takes part in dedup

    The no-duplicate-id invariant holds even when the upstream returns
    overlapping pages, or repeats an id within one page.
    """

    def merge(
        self, existing: tuple[ResultRecord, ...], page: Page
    ) -> tuple[ResultRecord, ...]:
        page.validate()

        if page.page_number == 1:
            base: tuple[ResultRecord, ...] = ()
        else:
            base = existing

        seen = {record.id for record in base}
        appended: list[ResultRecord] = []
        for record in page.records:
            if record.id in seen:
                continue
            seen.add(record.id)
            appended.append(record)

        return base + tuple(appended)
