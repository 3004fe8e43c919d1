from __future__ import annotations

from app.infra.notifier import OutOfBandNotifier
from app.infra.tenant import TenantContext
from app.services.announcement_service import AnnouncementService
from app.services.dashboard_service import DashboardService
from app.services.incident_service import IncidentService
from app.services.notification_service import NotificationService
from app.services.owner_service import OwnerService
from app.services.pet_service import PetService
from app.services.photo_service import PhotoService
from app.services.settings_service import SettingsService
from app.services.setup_service import SetupService
from app.services.stray_service import StrayService
from app.services.user_service import UserService
from app.services.vaccination_service import VaccinationService


class Database:
    """Every repository bound to one caller context.

    ``setup`` is the only member that works without a barangay; it is the
    path that creates one.
    """

    def __init__(self, context: TenantContext, notifier: OutOfBandNotifier | None = None) -> None:
        self.context = context
        photos = PhotoService(context)
        self.pets = PetService(context, photos)
        self.owners = OwnerService(context)
        self.vaccinations = VaccinationService(context)
        self.incidents = IncidentService(context)
        self.strays = StrayService(context, photos)
        self.users = UserService(context)
        self.settings = SettingsService(context, photos)
        self.notifications = NotificationService(context)
        self.announcements = AnnouncementService(context, photos)
        self.dashboard = DashboardService(context)
        self.setup = SetupService(notifier)
