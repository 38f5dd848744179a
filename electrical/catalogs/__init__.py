# API pública del dominio catalogs

from .models import (
    BoxComponent,
    CableComponent,
    CatalogComponent,
    InverterComponent,
    PanelComponent,
    PartComponent,
)
from .catalog import Catalogs, placeholder_part
from .catalog_yaml import load_catalogs

__all__ = [
    # modelos
    "PanelComponent",
    "InverterComponent",
    "CableComponent",
    "BoxComponent",
    "PartComponent",
    "CatalogComponent",

    # catálogo
    "Catalogs",
    "placeholder_part",
    "load_catalogs",
]
