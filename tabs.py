import logging
from typing import Optional
from edit_buffers import EditBuffers
from dataclasses import dataclass, field
from req_struct import HttpMethod, HttpRequest, HttpResponse
from errors import AppStateError, InvalidMethodError, TabStoreError


log = logging.getLogger(__name__)


@dataclass
class Tab:
    # Tab {{{
    name: str
    request: HttpRequest = field(default_factory=HttpRequest)
    response: Optional[HttpResponse] = None
    # }}}


class TabStore:
    """
    Ordered tabs plus the selected index. There is only one set
    of edit buffers, so every change of the selected index goes
    through save -> change index -> restore. The index itself is
    private and can only move through the methods below.
    """
    # TabStore {{{

    def __init__(self, buffers: EditBuffers, seed_url: str = "") -> None:
        self.buffers = buffers
        self._counter = 1
        self._selected = 0
        seed = self._create_tab()
        seed.request.url = seed_url
        self.tabs = [seed]
        self.restore()

    @property
    def selected_tab(self) -> int:
        return self._selected

    @property
    def current(self) -> Tab:
        if not 0 <= self._selected < len(self.tabs):
            raise AppStateError(f"Invalid tab index {self._selected}")
        return self.tabs[self._selected]

    def __len__(self) -> int:
        return len(self.tabs)

    def commit(self) -> None:
        """
        Writes the edit buffers into the selected tab's request
        """
        # commit {{{
        request = self.current.request
        buffers = self.buffers
        request.url = buffers.url_input
        request.method = buffers.selected_method.to_transport()
        request.body = buffers.body_input \
            if buffers.body_input != "" else None
        request.headers = list(buffers.headers_input)
        request.params = list(buffers.params_input)
        # }}}

    def restore(self) -> None:
        """
        Reads the selected tab's request back into the edit
        buffers, dropping any in-progress header/param input.
        """
        # restore {{{
        request = self.current.request
        try:
            method = HttpMethod.from_transport(request.method)
        except InvalidMethodError as error:
            # Only the four supported methods are ever written
            raise AppStateError(
                f"Tab '{self.current.name}' holds {error.method}"
            ) from error

        buffers = self.buffers
        buffers.url_input = request.url
        buffers.selected_method = method
        buffers.body_input = request.body \
            if request.body is not None else ""
        buffers.headers_input = list(request.headers)
        buffers.params_input = list(request.params)
        buffers.current_header_key = ""
        buffers.current_header_value = ""
        buffers.current_param_key = ""
        buffers.current_param_value = ""
        buffers.editing_header_index = None
        buffers.editing_param_index = None
        # }}}

    def next_tab(self) -> None:
        # next_tab {{{
        self._switch((self._selected + 1) % len(self.tabs))
        # }}}

    def prev_tab(self) -> None:
        # prev_tab {{{
        self._switch((self._selected - 1) % len(self.tabs))
        # }}}

    def switch_to(self, index: int) -> None:
        # switch_to {{{
        if index < 0 or index >= len(self.tabs):
            raise TabStoreError(f"Invalid tab index: {index + 1}")
        self._switch(index)
        # }}}

    def add_tab(self) -> Tab:
        # add_tab {{{
        self.commit()
        tab = self._create_tab()
        self.tabs.append(tab)
        self._selected = len(self.tabs) - 1
        self.restore()
        log.info("Opened %s", tab.name)
        return tab
        # }}}

    def close_tab(self) -> Tab:
        """
        Removes the selected tab. The last remaining tab can
        not be closed. When the removed tab was the last one
        the new last tab is selected, otherwise the index is
        kept and now refers to the following tab.
        """
        # close_tab {{{
        if len(self.tabs) <= 1:
            raise TabStoreError("Cannot close the last tab")

        self.commit()
        removed = self.tabs.pop(self._selected)
        if self._selected >= len(self.tabs):
            self._selected = len(self.tabs) - 1
        self.restore()
        log.info("Closed %s", removed.name)
        return removed
        # }}}

    def _switch(self, index: int) -> None:
        # _switch {{{
        self.commit()
        self._selected = index
        self.restore()
        log.debug("Selected %s", self.current.name)
        # }}}

    def _create_tab(self) -> Tab:
        # _create_tab {{{
        tab = Tab(name=f"Tab {self._counter}")
        self._counter += 1
        return tab
        # }}}
    # }}}
