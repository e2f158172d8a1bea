# core/viewmodel.py
# This file is part of Sightline - Live Console Views
#
# Console list view model: criteria, live query and visible window

"""View model behind the console list.

``ConsoleListViewModel`` connects the pieces of the console list:

- the CriteriaModel, whose (throttled) change events re-apply the
  predicate of the live query (``refresh``);
- the QueryEngine, whose live query is rebuilt when the mode or the
  sort/group options change (``refresh_controller``);
- the ViewWindowManager, which decides how much of the result set is
  handed to the rendering layer.

All work runs on one scheduler. Store change notifications, which the
store delivers on whatever context mutated it, are re-posted onto that
scheduler and tagged with the generation of the live query that produced
them; notifications from a live query that has since been replaced are
dropped.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple

from model.criteria import Criteria, GroupBy, ListOptions, Mode
from model.record import Record
from model.window import ScrollPosition, ViewWindowManager
from store.memory import ChangeSet, MemoryRecordStore, Section
from utils.config import ConsoleConfig
from utils.logger import get_logger
from utils.signals import Signal
from .criteria_model import CriteriaModel
from .engine import QueryEngine, RefreshResult, ResultSet
from .scheduler import Scheduler


@dataclass(frozen=True, slots=True)
class ListUpdate:
    """Published on ``did_change`` for each applied store change.

    Attributes:
        changes: Ids inserted, updated and removed in the result set
        animated: True when the list is on screen and the change should
            be shown as an incremental, animated update
    """

    changes: ChangeSet
    animated: bool


class ConsoleListViewModel:
    """State of one console list, as consumed by the rendering layer.

    Rendering-layer surface:
        visible_entities: The visible window, a prefix of ``entities``
        entities: The full result set
        sections: Sections of the result set, None when not grouping
        log_count, task_count: Badge counts, independent of the mode
        did_refresh: Signal sent after each successful refresh
        did_change: Signal of ``ListUpdate`` for applied store changes
        on_appear, on_disappear: Row visibility callbacks
        set_mode, set_options, set_visible: User actions

    Args:
        store: Record store the live query runs against
        scheduler: Context all state transitions run on
        criteria_model: Criteria source; one is created when omitted
        mode: Initial mode
        options: Initial sort and grouping options
        config: Engine settings
    """

    def __init__(
        self,
        store: MemoryRecordStore,
        scheduler: Scheduler,
        criteria_model: Optional[CriteriaModel] = None,
        mode: Mode = Mode.ALL,
        options: Optional[ListOptions] = None,
        config: Optional[ConsoleConfig] = None,
    ):
        self.config = config or ConsoleConfig()
        self.scheduler = scheduler
        self.logger = get_logger()

        self._owns_criteria_model = criteria_model is None
        self.criteria_model = criteria_model or CriteriaModel(scheduler, config=self.config)
        self.engine = QueryEngine(store, self.config.batch_size)
        self.window = ViewWindowManager(self.config.batch_size, self.config.edge_size)

        self.did_refresh = Signal()
        self.did_change = Signal()

        self._mode = mode
        self._options = options or ListOptions()
        self._is_visible = False
        self._closed = False

        self._entities: Tuple[Record, ...] = ()
        self._sections: Optional[Tuple[Section, ...]] = None
        self._log_count = 0
        self._task_count = 0
        self._applied_generation = 0
        self._applied_criteria: Criteria = self.criteria_model.criteria

        self._criteria_subscription = self.criteria_model.subscribe(
            self._on_criteria_change
        )
        self.refresh_controller()

    # ------------------------------------------------------------------
    # Rendering-layer state
    # ------------------------------------------------------------------

    @property
    def visible_entities(self) -> List[Record]:
        return self.window.window

    @property
    def entities(self) -> List[Record]:
        return list(self._entities)

    @property
    def sections(self) -> Optional[List[Section]]:
        return list(self._sections) if self._sections is not None else None

    @property
    def log_count(self) -> int:
        return self._log_count

    @property
    def task_count(self) -> int:
        return self._task_count

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def options(self) -> ListOptions:
        return self._options

    @property
    def grouping(self) -> GroupBy:
        return self._options.grouping(self._mode)

    @property
    def is_visible(self) -> bool:
        return self._is_visible

    @property
    def scroll_position(self) -> ScrollPosition:
        return self.window.scroll_position

    @property
    def limit(self) -> int:
        return self.window.limit

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def set_mode(self, mode: Mode) -> None:
        """Switch the listed subset; rebuilds the live query."""
        self._mode = mode
        self.refresh_controller()

    def set_options(self, options: ListOptions) -> None:
        """Change sorting or grouping; rebuilds the live query."""
        self._options = options
        self.refresh_controller()

    def set_visible(self, is_visible: bool) -> None:
        """Track whether the list is on screen.

        Becoming visible forces the window to be recomputed from the
        current results, whatever the scroll position.
        """
        was_visible, self._is_visible = self._is_visible, is_visible
        if is_visible and not was_visible:
            self._reload(self.engine.current(), is_mandatory=True)

    def on_appear(self, rid: str) -> bool:
        """A row came on screen. Returns True if the window changed."""
        return self.window.on_item_appear(rid)

    def on_disappear(self, rid: str) -> bool:
        """A row went off screen. Returns True if the window changed."""
        return self.window.on_item_disappear(rid)

    # ------------------------------------------------------------------
    # Query control
    # ------------------------------------------------------------------

    def refresh_controller(self) -> None:
        """Rebuild the live query for the current mode and options, then refresh."""
        self.engine.refresh_controller(
            self._mode,
            self.grouping,
            self._options.sort_key(self._mode),
            self._options.order,
            on_change=self._on_store_change,
        )
        self.refresh()

    def refresh(self) -> Optional[RefreshResult]:
        """Re-apply the current criteria to the live query.

        Returns:
            The applied result, or None if nothing was applied
        """
        criteria = self.criteria_model.criteria
        result = self.engine.refresh(self._mode, criteria)
        if result is None:
            return None
        if result.generation < self._applied_generation:
            self.logger.stale_update_dropped(result.generation, self._applied_generation)
            return None

        self._applied_generation = result.generation
        self._applied_criteria = criteria
        self._log_count = result.log_count
        self._task_count = result.task_count
        self._reload(result.result_set, is_mandatory=True)
        self.did_refresh.send()
        return result

    def close(self) -> None:
        """Stop listening to criteria and store changes."""
        if self._closed:
            return
        self._closed = True
        self._criteria_subscription.cancel()
        if self._owns_criteria_model:
            self.criteria_model.close()
        self.engine.close()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_criteria_change(self, criteria: Criteria) -> None:
        if not self._closed:
            self.refresh()

    def _on_store_change(self, changes: ChangeSet, generation: int) -> None:
        self.scheduler.call_soon(self._apply_store_change, changes, generation)

    def _apply_store_change(self, changes: ChangeSet, generation: int) -> None:
        if self._closed:
            return
        if not self.engine.is_current(generation):
            self.logger.stale_update_dropped(generation, self.engine.controller_generation)
            return

        self._log_count, self._task_count = self.engine.recount(self._applied_criteria)
        result_set = self.engine.current()
        if self._is_visible:
            self._reload(result_set, is_mandatory=False)
        else:
            # Off screen: keep the results current, leave the window alone
            self._entities = result_set.records
            self._sections = result_set.sections
        self.did_change.send(ListUpdate(changes, animated=self._is_visible))

    def _reload(self, result_set: ResultSet, is_mandatory: bool) -> None:
        self._entities = result_set.records
        self._sections = result_set.sections
        self.window.on_result_set_changed(self._entities, is_mandatory)
