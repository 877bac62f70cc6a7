"""Composition root: wire config, catalogs, storage, store and controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ki_sheet.engine.dice import UniformSource
from ki_sheet.engine.sheet_config import SheetConfig
from ki_sheet.engine.sheet_controller import SheetController
from ki_sheet.engine.storage import JsonSheetStorage
from ki_sheet.engine.store import SheetStore
from ki_sheet.models.catalogs import Catalogs, load_catalogs


log = logging.getLogger(__name__)


@dataclass(slots=True)
class SheetSession:
    """Runtime objects needed by a sheet front end."""

    config: SheetConfig
    catalogs: Catalogs
    storage: JsonSheetStorage
    store: SheetStore
    controller: SheetController


def bootstrap_session(
    config: SheetConfig | None = None,
    *,
    rng: UniformSource | None = None,
) -> SheetSession:
    """Load catalogs and the saved sheet, and build a ready controller.

    The saved active form is left as stored; call
    ``controller.sync_active_form()`` to persist the engine's correction.
    """
    config = config or SheetConfig.from_env()
    catalogs = load_catalogs(config.data_dir)
    storage = JsonSheetStorage(config.resolved_storage_dir)
    store = SheetStore(storage=storage)
    store.load()
    log.debug("Sheet loaded from %s (version %d)", storage.root, store.version)

    controller = SheetController(
        store=store,
        catalogs=catalogs,
        config=config,
        storage=storage,
        rng=rng,
    )
    slots = storage.list_slots()
    if slots:
        controller.active_slot_id = slots[0].id
    return SheetSession(config, catalogs, storage, store, controller)
