"""
Service catalog - the haircuts, shaves and treatments customers can book.
"""

from services.resource_service.base import ResourceService
from services.resource_service.models import Service


class ServiceCatalogService(ResourceService):
    """Bookable services at `/services`"""

    def __init__(self, api_client):
        super().__init__(api_client, "/services", Service.from_dict)

    def toggle_active(self, service: Service) -> Service:
        """Flip `isActive` on a service and return the updated record"""
        return self.update(service.id, {"isActive": not service.is_active})
