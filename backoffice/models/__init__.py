from backoffice.models.catalog_section import CatalogSection, SectionStatus
from backoffice.models.product import Product, ProductStatus
from backoffice.models.section_product import SectionProduct
from backoffice.models.section_service import SectionService
from backoffice.models.service import Service, ServiceStatus

__all__ = [
    "CatalogSection",
    "SectionStatus",
    "Product",
    "ProductStatus",
    "Service",
    "ServiceStatus",
    "SectionProduct",
    "SectionService",
]
