"""StudioFlow - node-based generative content workflows"""

from studioflow.config import VERSION

__version__ = VERSION
