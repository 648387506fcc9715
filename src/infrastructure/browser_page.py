from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, Dict, List, Tuple

from bs4 import BeautifulSoup, Tag


@dataclass(frozen=True)
class DomEvent:
    type: str
    target: Tag


Listener = Callable[[DomEvent], None]


class MediaElement:
    """Playback state of a <video> element. Starts paused, like a freshly loaded video."""

    def __init__(self, page: "BrowserPage", element: Tag):
        self.page = page
        self.element = element
        self.paused = True

    def play(self) -> None:
        if not self.paused:
            return
        self.paused = False
        self.page.dispatch(self.element, "play")

    def pause(self) -> None:
        if self.paused:
            return
        self.paused = True
        self.page.dispatch(self.element, "pause")


class BrowserPage:
    """
    A loaded page: the parsed static markup plus the event listeners and media
    state that live for as long as the page view does.

    Listeners are keyed by element identity. BeautifulSoup tags compare equal by
    content, so two identical buttons must still get separate listener lists.
    """

    def __init__(self, html: str):
        self.document = BeautifulSoup(html, "html.parser")
        self._listeners: DefaultDict[Tuple[int, str], List[Listener]] = defaultdict(list)
        self._media: Dict[int, MediaElement] = {}

    def select_one(self, selector: str):
        return self.document.select_one(selector)

    def select(self, selector: str) -> List[Tag]:
        return self.document.select(selector)

    def add_event_listener(self, element: Tag, event_type: str, listener: Listener) -> None:
        self._listeners[(id(element), event_type)].append(listener)

    def listener_count(self, element: Tag, event_type: str) -> int:
        return len(self._listeners.get((id(element), event_type), []))

    def dispatch(self, element: Tag, event_type: str) -> None:
        event = DomEvent(type=event_type, target=element)
        for listener in list(self._listeners.get((id(element), event_type), [])):
            listener(event)

    def click(self, element: Tag) -> None:
        self.dispatch(element, "click")

    def media(self, element: Tag) -> MediaElement:
        key = id(element)
        if key not in self._media:
            self._media[key] = MediaElement(self, element)
        return self._media[key]

    def html(self) -> str:
        return str(self.document)
