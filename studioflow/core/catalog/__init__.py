from .catalog_service import Brand, Catalog, CatalogError, CatalogService, Product

__all__ = ["Brand", "Catalog", "CatalogError", "CatalogService", "Product"]
