"""ClickUp API client for task operations."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ...core.config import DEFAULT_CLICKUP_BASE_URL
from ...core.dates import ensure_utc
from ...exceptions import ClickUpAPIError

logger = logging.getLogger(__name__)


class ClickUpClient:
    """Client for interacting with the ClickUp v2 API."""
    
    def __init__(self, api_key: str, base_url: str = DEFAULT_CLICKUP_BASE_URL, timeout: int = 30):
        """Initialize the ClickUp client.
        
        Args:
            api_key: ClickUp personal API token
            base_url: Base URL for ClickUp API
            timeout: Per-request timeout in seconds
        """
        if not api_key:
            raise ValueError("ClickUpClient requires an API key")
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        
        # Retries apply to idempotent methods only (GET/PUT)
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            status_forcelist=[429, 500, 502, 503, 504],
            backoff_factor=1,
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        
        self.session.headers.update({
            'Authorization': self.api_key,
            'Content-Type': 'application/json',
            'User-Agent': 'tasksync/1.0'
        })
    
    def _make_request(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None,
                      data: Optional[Dict[str, Any]] = None) -> Any:
        """Make a request to the ClickUp API.
        
        Args:
            method: HTTP method
            endpoint: API endpoint
            params: Query parameters
            data: Request body data
            
        Returns:
            JSON response data, or None for empty responses
            
        Raises:
            ClickUpAPIError: If the API request fails
        """
        url = f"{self.base_url}{endpoint}"
        
        try:
            logger.debug(f"Making {method} request to {url} with params: {params}")
            response = self.session.request(method, url, params=params, json=data, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"ClickUp API request failed: {e}")
            if e.response is not None:
                raise ClickUpAPIError(
                    f"HTTP {e.response.status_code}: {e.response.text}",
                    status_code=e.response.status_code,
                    response_body=e.response.text
                ) from e
            raise ClickUpAPIError(f"Request failed: {e}") from e
        
        if response.status_code == 204 or not response.content:
            return None
        return response.json()
    
    def get_authorized_user(self) -> Dict[str, Any]:
        """Return the user owning the API token."""
        result = self._make_request('GET', '/user') or {}
        return result.get('user', result)
    
    def iter_tasks_updated_since(self, list_id: str, updated_since: datetime) -> Iterator[Dict[str, Any]]:
        """Yield tasks of a list updated strictly after ``updated_since``, page by page.
        
        Subtasks and closed tasks are included so completions are observed too.
        """
        updated_since_ms = int(ensure_utc(updated_since).timestamp() * 1000)
        page = 0
        
        while True:
            params = {
                'date_updated_gt': updated_since_ms,
                'subtasks': 'true',
                'include_closed': 'true',
                'page': page
            }
            logger.info(f"Fetching ClickUp tasks page {page} of list {list_id} updated since {updated_since_ms}")
            data = self._make_request('GET', f'/list/{list_id}/task', params=params) or {}
            tasks = data.get('tasks') or []
            yield from tasks
            
            if not tasks or data.get('last_page', True):
                break
            page += 1
    
    def get_tasks_updated_since(self, list_id: str, updated_since: datetime) -> List[Dict[str, Any]]:
        """Get all tasks of a list updated strictly after ``updated_since``."""
        tasks = list(self.iter_tasks_updated_since(list_id, updated_since))
        logger.info(f"Retrieved {len(tasks)} updated ClickUp tasks from list {list_id}")
        return tasks
    
    def update_task(self, task_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Update an existing ClickUp task (ClickUp uses PUT)."""
        logger.info(f"Updating ClickUp task {task_id} with payload: {payload}")
        return self._make_request('PUT', f'/task/{task_id}', data=payload)
