"""
Pipeline module: raw observation in, one ExpenseRecord out.

    block ordering -> normalize -> enhance -> remote parse (with deadline)
                                           -> local fallback on any failure

The remote and local tiers are mutually exclusive per observation; partial
results are never merged.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime
from typing import Optional

from expense_parser.config import PipelineConfig
from expense_parser.exceptions import NoTextFoundError, RemoteParseError
from expense_parser.extractor.amount_parser import AmountExtractor
from expense_parser.extractor.currency import enhance
from expense_parser.extractor.local_parser import parse_local
from expense_parser.extractor.remote_parser import RemoteParser
from expense_parser.schemas import ExpenseRecord, RawObservation
from expense_parser.utils.text_utils import normalize, order_text_blocks

logger = logging.getLogger(__name__)


def prepare_text(observation: RawObservation) -> str:
    """
    Observation text in reading order, before normalization.

    Raises:
        NoTextFoundError: text is empty or whitespace only
    """
    text = order_text_blocks(observation.text_blocks) if observation.text_blocks else ""
    if not text.strip():
        text = observation.text
    if not text or not text.strip():
        raise NoTextFoundError()
    return text


class ExpensePipeline:
    """
    Orchestrates one observation at a time; holds no per-observation state,
    so a single instance may serve concurrent callers.

    Args:
        config: PipelineConfig; PipelineConfig.from_env() when omitted
        remote_parser: Overrides the parser built from config
        executor: Executor for remote calls; an owned one is created otherwise
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 remote_parser: Optional[RemoteParser] = None,
                 executor: Optional[ThreadPoolExecutor] = None):
        self.config = config or PipelineConfig.from_env()
        self._owns_parser = remote_parser is None
        self.remote_parser = remote_parser if remote_parser is not None else RemoteParser.from_config(self.config)
        self.amount_extractor = AmountExtractor(self.config.best_guess_min, self.config.best_guess_max)

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="remote-parse"
        )
        # Separate pool so submit() never starves the remote calls it waits on.
        self._task_executor: Optional[ThreadPoolExecutor] = None

    # --- remote tier ---

    def _try_remote(self, text: str) -> Optional[ExpenseRecord]:
        if self.remote_parser is None:
            return None

        future = self.remote_parser.submit(text, self._executor)
        try:
            record = future.result(timeout=self.config.deadline)
        except FuturesTimeoutError:
            future.cancel()
            logger.warning("Remote parser missed the %.1fs deadline, falling back to local parsing",
                           self.config.deadline)
            return None
        except RemoteParseError as e:
            logger.warning("Remote parse failed (%s: %s), falling back to local parsing",
                           type(e).__name__, e)
            return None
        except Exception as e:
            logger.error("Unexpected remote parser error, falling back to local parsing: %s", e, exc_info=True)
            return None

        if record.amount <= 0 and self.config.fallback_on_zero_amount:
            logger.warning("Remote parser returned zero amount, using local result instead")
            return None
        return record

    # --- public API ---

    def process(self, observation: RawObservation) -> ExpenseRecord:
        """
        Extract an expense from one observation.

        Never raises for ambiguous text: an inconclusive observation yields
        a zero-amount record.

        Raises:
            TypeError: observation is not a RawObservation
            NoTextFoundError: observation text is empty
        """
        if not isinstance(observation, RawObservation):
            raise TypeError(f"process() expects RawObservation, got {type(observation).__name__}")

        text = prepare_text(observation)
        prepared = enhance(normalize(text))

        record = self._try_remote(prepared)
        if record is None:
            record = parse_local(prepared, raw_text=text, amount_extractor=self.amount_extractor)

        raw_text = observation.text if observation.text.strip() else text
        return record.model_copy(update={"raw_text": raw_text, "timestamp": datetime.now()})

    def process_text(self, text: str, **kwargs) -> ExpenseRecord:
        """Convenience wrapper: process(RawObservation(text=text, ...))."""
        if not isinstance(text, str):
            raise TypeError(f"process_text() expects str, got {type(text).__name__}")
        return self.process(RawObservation(text=text, **kwargs))

    def submit(self, observation: RawObservation) -> "Future[ExpenseRecord]":
        """Process on a worker thread; the caller decides how long to wait."""
        if self._task_executor is None:
            self._task_executor = ThreadPoolExecutor(
                max_workers=self.config.max_workers, thread_name_prefix="expense-pipeline"
            )
        return self._task_executor.submit(self.process, observation)

    def close(self):
        if self._task_executor is not None:
            self._task_executor.shutdown(wait=False)
        if self._owns_executor:
            self._executor.shutdown(wait=False)
        if self._owns_parser and self.remote_parser is not None:
            self.remote_parser.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def process_observation(observation: RawObservation, config: Optional[PipelineConfig] = None) -> ExpenseRecord:
    """One-shot helper that builds and tears down a pipeline."""
    with ExpensePipeline(config or PipelineConfig()) as pipeline:
        return pipeline.process(observation)
