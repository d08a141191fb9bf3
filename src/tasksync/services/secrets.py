"""
Secret Manager lookup for the ClickUp and Motion API keys.
"""

import logging
import os
from typing import Dict, Iterable, Optional
from google.api_core.exceptions import GoogleAPICallError, NotFound
from google.cloud import secretmanager

logger = logging.getLogger(__name__)

# Environment variable -> secret id
API_KEY_SECRETS = {
    "CLICKUP_API_KEY": "clickup-api-key",
    "MOTION_API_KEY": "motion-api-key",
}


class SecretManagerService:
    """Reads API keys stored as Secret Manager secrets of one project."""

    def __init__(self, project_id: Optional[str] = None,
                 client: Optional[secretmanager.SecretManagerServiceClient] = None):
        self.project_id = project_id or os.getenv("GOOGLE_CLOUD_PROJECT")
        if not self.project_id:
            raise ValueError("GOOGLE_CLOUD_PROJECT environment variable must be set")

        self.client = client or secretmanager.SecretManagerServiceClient()
        self._cache: Dict[str, str] = {}

    def get_secret(self, secret_id: str, version: str = "latest") -> Optional[str]:
        """
        Return the secret payload, or None when the secret does not exist.

        Raises:
            GoogleAPICallError: For any failure other than a missing secret
        """
        if secret_id in self._cache:
            return self._cache[secret_id]

        name = self.client.secret_version_path(self.project_id, secret_id, version)
        try:
            response = self.client.access_secret_version(request={"name": name})
        except NotFound:
            logger.warning(f"Secret {secret_id} not found in project {self.project_id}")
            return None

        value = response.payload.data.decode("UTF-8").strip()
        self._cache[secret_id] = value
        logger.info(f"Retrieved secret: {secret_id}")
        return value

    def get_api_keys(self, env_keys: Iterable[str]) -> Dict[str, str]:
        """
        Look up the given API key variables; keys that cannot be read are left out.

        Args:
            env_keys: Environment variable names from ``API_KEY_SECRETS``
        """
        keys = {}
        for env_key in env_keys:
            secret_id = API_KEY_SECRETS[env_key]
            try:
                value = self.get_secret(secret_id)
            except GoogleAPICallError as e:
                logger.error(f"Failed to read secret {secret_id}: {e}")
                continue
            if value:
                keys[env_key] = value
        return keys
