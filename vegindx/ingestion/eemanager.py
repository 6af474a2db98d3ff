"""
Module `ingestion.eemanager` provides the EarthEngineManager class to
encapsulate Google Earth Engine initialization, retries, and image collection retrieval.
"""

import os
import json
import time
from typing import Any, Callable, Optional

from google.oauth2.credentials import Credentials

import ee
from ee import EEException

from vegindx.core.logger import Logger


class EarthEngineManager:
    """
    Manages interaction with Google Earth Engine: initialization, retries, and collection retrieval.
    """

    def __init__(
        self,
        credential_path: Optional[str] = None,
        project: Optional[str] = None,
        logger=None,
    ):
        self.credential_path = credential_path
        # Allow non-interactive auth using a refresh token passed via env.
        self.token_env = os.getenv("EARTHENGINE_TOKEN")
        self.project = project or os.getenv("VEGINDX_EE_PROJECT")
        self.logger = logger or Logger.get_logger(__name__)
        self._initialized = False

    def _token_credentials(self) -> Any:
        creds_data = None
        if os.path.exists(self.token_env):
            with open(self.token_env, "r", encoding="utf-8") as fh:
                creds_data = json.load(fh)
        else:
            try:
                creds_data = json.loads(self.token_env)
            except json.JSONDecodeError:
                self.logger.warning("EARTHENGINE_TOKEN is neither a file nor JSON")
        if not creds_data or "refresh_token" not in creds_data:
            return None
        return Credentials(
            None,
            refresh_token=creds_data.get("refresh_token"),
            token_uri=creds_data.get("token_uri", ee.oauth.TOKEN_URI),
            client_id=creds_data.get("client_id", ee.oauth.CLIENT_ID),
            client_secret=creds_data.get("client_secret", ee.oauth.CLIENT_SECRET),
            scopes=creds_data.get("scopes", ee.oauth.SCOPES),
            quota_project_id=creds_data.get("project"),
        )

    def initialize(self, force: bool = False) -> None:
        """
        Authenticate & initialize Earth Engine.
        If a service-account JSON path is given, use it; then a refresh token
        from EARTHENGINE_TOKEN; otherwise default credentials, prompting once
        if those are missing.
        """
        if self._initialized and not force:
            return
        project = self.project
        try:
            token_creds = None
            if not self.credential_path and self.token_env:
                token_creds = self._token_credentials()
            if self.credential_path:
                sa_credentials: Any = ee.ServiceAccountCredentials(
                    None, self.credential_path  # type: ignore[arg-type]
                )
                ee.Initialize(sa_credentials, project=project)
            elif token_creds is not None:
                ee.Initialize(token_creds, project=project)
            else:
                ee.Initialize(project=project)
        except EEException:
            self.logger.info("Earth Engine credentials missing; authenticating")
            ee.Authenticate()
            ee.Initialize(project=project)
        self._initialized = True

    def safe_get_info(self, obj, max_retries: int = 3):
        """
        Wrapper for obj.getInfo() that:
          - retries transient errors
          - on PERMISSION_DENIED, forces a re-auth + re-init and retries once
          - raises after max_retries
        """
        for attempt in range(1, max_retries + 1):
            try:
                return obj.getInfo()
            except EEException as e:
                msg = str(e)
                if "PERMISSION_DENIED" in msg:
                    self.logger.error(
                        "Earth Engine permission denied. Re-authenticating..."
                    )
                    ee.Authenticate()
                    self.initialize(force=True)
                    if attempt == 1:
                        continue
                if attempt < max_retries:
                    backoff = 2 ** (attempt - 1)
                    self.logger.warning(
                        "Transient EE error (attempt %d/%d): %s - retrying in %ds",
                        attempt,
                        max_retries,
                        msg,
                        backoff,
                    )
                    time.sleep(backoff)
                    continue
                self.logger.error(
                    "Failed to getInfo() after %d attempts: %s", attempt, msg
                )
                raise

    def get_image_collection(
        self,
        collection_id: str,
        start_date: str,
        end_date: str,
        region,
        cloud_mask: Optional[Callable[[ee.Image], ee.Image]] = None,
    ) -> ee.ImageCollection:
        """
        Return an EE ImageCollection filtered by date and region, with optional
        per-image cloud masking.
        """
        coll = (
            ee.ImageCollection(collection_id)
            .filterDate(start_date, end_date)
            .filterBounds(region)
        )
        if cloud_mask is not None:
            coll = coll.map(cloud_mask)
        return coll


# Convenience singleton
ee_manager = EarthEngineManager()
