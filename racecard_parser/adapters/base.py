import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any

from ..config_manager import ConfigurationManager
from ..sources import TrackEntry


class BaseAdapter(ABC):
    """
    Common shape of a bookmaker site adapter.

    Construction only stores the ConfigurationManager. The site block under
    DATA_SOURCES_V2 (base URL, schedule path, track denylist, selector
    overrides) is read by initialize(), which must succeed before any page is
    requested.
    """

    source_id: str = "base_adapter"

    def __init__(self, config_manager: ConfigurationManager):
        self.config_manager = config_manager
        self.site_config: Optional[Dict[str, Any]] = None
        self.is_initialized: bool = False

    def initialize(self) -> bool:
        """Reads this site's settings block. False when it is absent or disabled."""
        self.site_config = self.config_manager.get_adapter_config(self.source_id)
        self.is_initialized = bool(self.site_config)
        if self.is_initialized:
            logging.info(f"[{self.source_id}] Site settings loaded; base URL {self.site_config.get('base_url')}.")
        else:
            logging.info(f"[{self.source_id}] No enabled site settings; adapter stays idle.")
        return self.is_initialized

    @abstractmethod
    async def fetch(self) -> List[TrackEntry]:
        """Scrapes the site's default schedule into track rows."""
        raise NotImplementedError
