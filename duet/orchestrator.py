"""
Block orchestration.

The orchestrator owns two runtimes and runs a document's blocks in order.
After each block it publishes the executing runtime's top-level bindings
into the bridge namespace the other runtime reads.
"""

import logging
from collections import namedtuple

from .bridge import BridgeNamespace, SyncReport
from .exceptions import ConfigurationError, ExecutionError, NameNotFoundError
from .runtimes.base import BlockOutput
from .values import ConversionRegistry


class BlockResult(namedtuple('BlockResult', ['index', 'block', 'output', 'sync', 'skipped'])):
    """Outcome of one block: its captured output and what it published."""

    __slots__ = ()


_NO_OUTPUT = BlockOutput('', [])
_NO_CHANGES = SyncReport((), (), ())


class Orchestrator:
    """
    Runs blocks in document order across two runtimes.

    Args:
        primary (Runtime): First runtime, e.g. Python.
        secondary (Runtime): Second runtime, e.g. R.
        conversions (ConversionRegistry, optional): Conversion rules shared by
            both bridges. A fresh registry is created when omitted.
    """

    def __init__(self, primary, secondary, conversions=None):
        if primary.language == secondary.language:
            raise ConfigurationError(f"both runtimes handle '{primary.language}' blocks")

        self.primary = primary
        self.secondary = secondary
        self.conversions = conversions if conversions is not None else ConversionRegistry()
        for runtime in (primary, secondary):
            runtime.register_conversions(self.conversions)

        # The bridge visible inside each runtime holds the *other* runtime's bindings.
        self._bridges = {
            primary.language: BridgeNamespace(secondary.language, primary.family, self.conversions),
            secondary.language: BridgeNamespace(primary.language, secondary.family, self.conversions),
        }
        self._runtimes = {
            primary.language: primary,
            secondary.language: secondary,
        }

    @property
    def languages(self):
        return list(self._runtimes)

    def runtime_for(self, language):
        return self._runtimes.get(language.lower())

    def bridge_for(self, language):
        """Return the bridge namespace visible inside the runtime for ``language``."""
        return self._bridges[language.lower()]

    def other(self, runtime):
        return self.secondary if runtime is self.primary else self.primary

    def run(self, document):
        """
        Execute every block of ``document`` in order.

        Args:
            document (Document): The parsed document.

        Returns:
            list: One BlockResult per block.

        Raises:
            ExecutionError: A block failed; later blocks were not run.
            NameNotFoundError: A block read a name absent from its bridge.
            ConfigurationError: A runtime could not be started.
        """
        logger = logging.getLogger(__name__)
        logger.info(f"Running {len(document.blocks)} blocks from {document.source or '<string>'}")

        results = []
        for index, block in enumerate(document.blocks):
            if not block.options.eval:
                logger.debug(f"Skipping block {index} ({block.language}): eval=FALSE")
                results.append(BlockResult(index, block, _NO_OUTPUT, _NO_CHANGES, True))
                continue
            results.append(self.run_block(index, block))

        logger.info(f"Finished {len(results)} blocks")
        return results

    def run_block(self, index, block):
        """
        Execute one block and synchronize its runtime's bindings.

        Args:
            index (int): Position of the block in its document.
            block (Block): The block to run.

        Returns:
            BlockResult: Captured output and the synchronization report.
        """
        logger = logging.getLogger(__name__)

        runtime = self.runtime_for(block.language)
        if runtime is None:
            raise ExecutionError(
                index, block.language,
                f"no runtime for language '{block.language}' (available: {', '.join(self.languages)})",
                label=block.label,
            )

        logger.debug(f"Executing block {index} ({block.language}, line {block.line})")
        try:
            runtime.start()
            runtime.install_bridge(self._bridges[runtime.language])
            output = runtime.execute(block.code, label=block.label)
        except (NameNotFoundError, ConfigurationError) as e:
            e.block_index = index
            logger.error(f"Block {index} ({block.language}) failed: {e}")
            raise
        except (Exception, SystemExit) as e:
            # sys.exit() inside a block fails that block.
            detail = f"{type(e).__name__}: {e}"
            logger.error(f"Block {index} ({block.language}) failed: {detail}")
            raise ExecutionError(index, block.language, detail, label=block.label) from e

        other = self.other(runtime)
        sync = self._bridges[other.language].publish(
            runtime.bindings(), runtime.wrap, same=runtime.same_value
        )
        return BlockResult(index, block, output, sync, False)

    def close(self):
        for runtime in (self.primary, self.secondary):
            runtime.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
