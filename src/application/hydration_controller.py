import logging
from typing import Optional

from bs4 import Tag

from src.domain.models import StarMetric, VideoState
from src.infrastructure.browser_page import BrowserPage, DomEvent

logger = logging.getLogger(__name__)

STAR_LINK_SELECTOR = "a.github-stars-link"
STAR_BADGE_CLASS = "star-badge"
VIDEO_CONTAINER_SELECTOR = ".video-container"
VIDEO_CONTROL_SELECTOR = "button.video-play-button"
STATE_ATTR = "data-state"
HYDRATED_ATTR = "data-hydrated"


def format_star_count(count: int) -> str:
    if count >= 1000:
        return f"{count / 1000:.1f}k"
    return str(count)


class HydrationController:
    """
    Attaches interactive behaviour to a page's static markup once it has loaded.

    The star metric is injected by the caller. Both widgets are idempotent, so
    hydrate() may run any number of times on the same page.
    """

    def __init__(self, star_metric: Optional[StarMetric] = None):
        self.star_metric = star_metric

    def hydrate(self, page: BrowserPage) -> None:
        self.inject_star_badge(page)
        for container in page.select(VIDEO_CONTAINER_SELECTOR):
            self.wire_video(page, container)

    def inject_star_badge(self, page: BrowserPage) -> Optional[Tag]:
        """
        Appends "★ <count>" to the navigation link unless a badge is already there.

        Returns:
            Optional[Tag]: The badge on the page, or None when no badge is shown.
        """
        link = page.select_one(STAR_LINK_SELECTOR)
        if link is None:
            return None

        existing = link.find("span", class_=STAR_BADGE_CLASS)
        if existing is not None:
            return existing

        if self.star_metric is None or not self.star_metric.is_displayable:
            return None

        badge = page.document.new_tag("span", attrs={"class": STAR_BADGE_CLASS})
        badge.string = f"★ {format_star_count(self.star_metric.count)}"
        link.append(badge)
        return badge

    def wire_video(self, page: BrowserPage, container: Tag) -> None:
        """
        Keeps the container's data-state in step with its video.

        The video's own play/pause events drive the state, so native controls and
        keyboard shortcuts are reflected as well as the custom button.
        """
        if container.get(HYDRATED_ATTR) == "true":
            return

        video = container.find("video")
        control = container.select_one(VIDEO_CONTROL_SELECTOR)
        if video is None or control is None:
            logger.debug("Video container without a video or play control; skipping.")
            return

        media = page.media(video)

        def set_state(state: VideoState) -> None:
            container[STATE_ATTR] = state.value

        def on_click(event: DomEvent) -> None:
            media.play()
            set_state(VideoState.PLAYING)

        def on_play(event: DomEvent) -> None:
            set_state(VideoState.PLAYING)

        def on_pause(event: DomEvent) -> None:
            set_state(VideoState.PAUSED)

        set_state(VideoState.PAUSED if media.paused else VideoState.PLAYING)
        page.add_event_listener(control, "click", on_click)
        page.add_event_listener(video, "play", on_play)
        page.add_event_listener(video, "pause", on_pause)
        container[HYDRATED_ATTR] = "true"

    @staticmethod
    def is_control_hidden(container: Tag) -> bool:
        # The stylesheet hides the button for [data-state="playing"].
        return container.get(STATE_ATTR) == VideoState.PLAYING.value
