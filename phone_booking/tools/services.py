"""Salon service catalog: spoken labels and scheduling handles."""

import logging
from enum import Enum
from typing import Optional

from phone_booking.config import SchedulingConfig, settings

logger = logging.getLogger(__name__)


class Service(str, Enum):
    """Bookable services, plus NONE for "could not tell"."""

    MAN_CUT = "homme"
    WOMAN_CUT = "femme"
    NONBINARY_CUT = "nonbinaire"
    NONE = "none"


SERVICE_LABELS: dict[Service, str] = {
    Service.MAN_CUT: "coupe homme",
    Service.WOMAN_CUT: "coupe femme",
    Service.NONBINARY_CUT: "coupe non binaire",
}

BOOKABLE_SERVICES: tuple[Service, ...] = (
    Service.MAN_CUT,
    Service.WOMAN_CUT,
    Service.NONBINARY_CUT,
)


def service_label(service: Service) -> str:
    """Return the French label spoken and texted for a service."""
    return SERVICE_LABELS.get(service, service.value)


def configured_event_types(config: Optional[SchedulingConfig] = None) -> dict[Service, str]:
    """Map each bookable service to its scheduling handle, skipping unset ones."""
    cfg = config or settings.scheduling
    handles = {
        Service.MAN_CUT: cfg.event_type_uri_man,
        Service.WOMAN_CUT: cfg.event_type_uri_woman,
        Service.NONBINARY_CUT: cfg.event_type_uri_nonbinary,
    }
    missing = [svc.value for svc, uri in handles.items() if not uri]
    if missing:
        logger.warning("No scheduling handle configured for: %s", ", ".join(missing))
    return {svc: uri for svc, uri in handles.items() if uri}
