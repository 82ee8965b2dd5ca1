# main.py
"""
Entry point: wires repository and services from configuration and routes a
signing link or shows the dashboard.

    python main.py                      -> list templates
    python main.py "<signing link>"     -> show the signing session of that link
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from core.config.config_service import ConfigService, config_service
from documents.exceptions.errors import SigningDeskError
from documents.logic.lifecycle import DocumentLifecycle
from documents.logic.setup_service import SetupService
from documents.logic.signing_links import RouteKind, route_for_url
from documents.logic.signing_service import SigningService
from documents.repository import InMemoryTemplateStore, SQLiteTemplateStore, TemplateRepository

logger = logging.getLogger(__name__)


@dataclass
class Services:
    repository: TemplateRepository
    lifecycle: DocumentLifecycle
    setup: SetupService
    signing: SigningService


def build_services(cfg: ConfigService) -> Services:
    if cfg.storage.backend == "memory":
        store = InMemoryTemplateStore()
    else:
        store = SQLiteTemplateStore(cfg.storage.db_path)
    repository = TemplateRepository(store)
    lifecycle = DocumentLifecycle()
    return Services(
        repository=repository,
        lifecycle=lifecycle,
        setup=SetupService(repository, lifecycle=lifecycle, links=cfg.links, fields_config=cfg.fields),
        signing=SigningService(repository, lifecycle=lifecycle, config=cfg.signing),
    )


def main(argv: Optional[List[str]] = None, cfg: Optional[ConfigService] = None) -> int:
    cfg = cfg or config_service
    logging.basicConfig(level=cfg.general.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = sys.argv[1:] if argv is None else argv
    services = build_services(cfg)

    route = route_for_url(args[0] if args else "")
    if route.kind == RouteKind.SIGNING:
        try:
            session = services.signing.open_session(route.template_id, route.recipient_id)
        except SigningDeskError as ex:
            print(f"Access Denied: {ex.message}")
            return 1
        print(f"{session.file_name} - signing as {session.recipient.name}")
        for f in session.fields:
            print(f"  page {f.page}: {f.type.label}")
        return 0

    templates = services.repository.list_templates()
    print(f"{cfg.general.app_name} {cfg.general.version} - {len(templates)} document(s)")
    for t in templates:
        print(f"  {t.id}  {t.file_name}  [{t.status.value}]  {t.signed_count}/{len(t.recipients)} signed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
