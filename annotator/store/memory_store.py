"""
In-Memory Document Store.

A DocumentStore backed by a dictionary of datasets. Records are injected
by the caller, usually from the YAML seed file named in settings.yaml,
so sample data never lives in code.

Features:
    - Optional simulated latency for fetch/save
    - Saves replace the record with the same (dataset, id)
    - Copies in, copies out

Author: ML Engineering Team
"""

import copy
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import yaml

from config import get_config
from annotator.utils.logger import get_logger
from annotator.utils.exceptions import StoreError
from annotator.models.document import DocumentRecord, dataset_ids
from .base import DocumentStore

logger = get_logger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """
    Document store holding records in process memory.

    Nothing survives a restart. Every known dataset exists (possibly
    empty); fetches against other names return None.

    Attributes:
        fetch_delay: Seconds to sleep before each fetch
        save_delay: Seconds to sleep before each save

    Example:
        >>> store = InMemoryDocumentStore.from_config()
        >>> store.max_id("invoices")
        3
        >>> store.fetch("unknown_dataset", 1) is None
        True
    """

    def __init__(
        self,
        records: Iterable[DocumentRecord] = (),
        fetch_delay: Optional[float] = None,
        save_delay: Optional[float] = None
    ) -> None:
        self.fetch_delay = fetch_delay if fetch_delay is not None else \
            get_config("store.memory.fetch_delay", 0.0)
        self.save_delay = save_delay if save_delay is not None else \
            get_config("store.memory.save_delay", 0.0)

        self._datasets: Dict[str, Dict[int, DocumentRecord]] = {
            dataset_id: {} for dataset_id in dataset_ids()
        }
        for record in records:
            self._datasets[record.dataset_id][record.id] = record

        logger.info(
            f"InMemoryDocumentStore initialized "
            f"({sum(len(d) for d in self._datasets.values())} records)"
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path], **kwargs) -> 'InMemoryDocumentStore':
        """
        Build a store from a seed file mapping dataset ids to record lists.

        Args:
            path: Path to the YAML seed file.
            **kwargs: Passed to the constructor (delays).

        Raises:
            StoreError: If the file is missing or malformed.
        """
        path = Path(path)
        if not path.exists():
            raise StoreError(f"Seed file not found: {path}", {"path": str(path)})

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise StoreError(f"Invalid seed file: {path}", {"reason": str(e)})

        records: List[DocumentRecord] = []
        for dataset_id, items in data.items():
            for item in items or []:
                records.append(DocumentRecord.from_dict(item, dataset_id=dataset_id))

        logger.debug(f"Loaded {len(records)} seed records from {path}")
        return cls(records, **kwargs)

    @classmethod
    def from_config(cls) -> 'InMemoryDocumentStore':
        """Build a store from ``store.memory.seed_file``; empty when unset."""
        seed_file = get_config("store.memory.seed_file")
        if not seed_file:
            return cls()
        return cls.from_yaml(seed_file)

    def fetch(self, dataset_id: str, document_id: int) -> Optional[DocumentRecord]:
        if self.fetch_delay:
            time.sleep(self.fetch_delay)

        dataset = self._datasets.get(dataset_id)
        if dataset is None:
            logger.debug(f"Fetch from unknown dataset '{dataset_id}'")
            return None

        record = dataset.get(document_id)
        if record is None:
            logger.debug(f"Document {dataset_id}#{document_id} not found")
            return None

        return copy.deepcopy(record)

    def save(self, record: DocumentRecord) -> bool:
        if self.save_delay:
            time.sleep(self.save_delay)

        dataset = self._datasets.get(record.dataset_id)
        if dataset is None:
            logger.warning(f"Refusing to save into unknown dataset '{record.dataset_id}'")
            return False

        dataset[record.id] = copy.deepcopy(record)
        logger.info(f"Saved annotations for {record.dataset_id}#{record.id}")
        return True

    def max_id(self, dataset_id: str) -> int:
        dataset = self._datasets.get(dataset_id)
        if not dataset:
            return 0
        return max(dataset)

    def count(self, dataset_id: Optional[str] = None) -> int:
        """Number of records in one dataset, or in all of them."""
        if dataset_id is not None:
            return len(self._datasets.get(dataset_id, {}))
        return sum(len(d) for d in self._datasets.values())
