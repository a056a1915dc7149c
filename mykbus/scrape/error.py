"""
Scrape Error Types.
"""


class ScrapeError(Exception):
    """
    Root Scraping Error.
    """


class UpstreamUnavailable(ScrapeError):
    """
    The timetable page could not be fetched or rendered in time; the whole
    pass is lost.
    """


class MalformedSection(ScrapeError):
    """
    A panel's table is missing, has no usable times, or is incomplete.
    """
