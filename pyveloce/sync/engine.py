"""Sync engine pulling and pushing UI definitions of product models."""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Callable, Optional

from .. import codec
from ..api import VeloceClient
from ..config import DEFAULT_FOLDER_NAME, config
from ..exceptions import UnrecognizedDefinitionError, VeloceParseError
from ..models import ProductModel
from ..output import OutputFormatter
from ..ui import RecordTreeWriter, UiDefinitionsBuilder
from ..utils import DEFAULT_MAX_WORKERS, dump_json, write_file_safe
from .members import MemberFilter, MemberType
from .report import RecordResult, RecordStatus, SyncReport

logger = logging.getLogger(__name__)

UI_DEFINITIONS_FIELD = "VELOCPQ__UiDefinitionsId__c"


class SyncEngine:
    """Synchronizes product model UI definitions with a local source tree.

    Each record is processed as an independent task; a failing record is
    reported and does not stop the others.
    """

    def __init__(
        self,
        client: VeloceClient,
        output: Optional[OutputFormatter] = None,
        source_path: Optional[Path] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        folder_name: str = DEFAULT_FOLDER_NAME,
    ):
        """Initialize sync engine.

        Args:
            client: API client
            output: Output formatter for displaying progress/status
            source_path: Local source directory (uses config if not provided)
            max_workers: Number of records processed in parallel
            folder_name: Folder receiving newly created documents
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.source_path = source_path or config.source_path
        self.max_workers = max_workers
        self.folder_name = folder_name

    def _fetch_records(
        self, members: MemberFilter, member_types: tuple[MemberType, ...]
    ) -> list[ProductModel]:
        names: list[str] = []
        for member_type in member_types:
            names.extend(n for n in members.model_names(member_type) if n not in names)

        if not members.selects_all and not names:
            return []

        self.output.info(
            f"Fetching product models: {', '.join(names) if names else 'All'}"
        )
        records = self.client.query_records(names or None)
        self.output.info(f"Product models result count: {len(records)}")
        return records

    def _run_batch(
        self,
        records: list[ProductModel],
        task: Callable[[ProductModel], RecordResult],
        direction: str,
    ) -> SyncReport:
        """Run one task per record in parallel and collect the results."""
        report = SyncReport(direction=direction)
        if not records:
            return report

        logger.debug(
            f"Processing {len(records)} record(s) with {self.max_workers} workers"
        )

        def execute_with_timing(record: ProductModel) -> RecordResult:
            start = time.time()
            try:
                result = task(record)
            except Exception as e:
                logger.debug("Record %s failed", record.name, exc_info=True)
                if not self.output.quiet:
                    self.output.error(f"Error syncing {record.name}: {e}")
                result = RecordResult(
                    name=record.name, status=RecordStatus.FAILED, error=str(e)
                )
            result.elapsed = time.time() - start
            return result

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(execute_with_timing, record): record
                for record in records
            }
            for future in as_completed(futures):
                result = future.result()
                logger.debug(
                    f"{result.status.value}: {result.name} in {result.elapsed:.2f}s"
                )
                report.results.append(result)

        # Report in query order
        order = {r.name: i for i, r in enumerate(records)}
        report.results.sort(key=lambda r: order.get(r.name, len(order)))
        return report

    # =========================
    # Pull
    # =========================

    def pull(self, members: Optional[MemberFilter] = None) -> SyncReport:
        """Download UI definitions (and PML content) into the source tree.

        Args:
            members: Records/definitions to pull (everything if omitted)

        Returns:
            Report with one result per record
        """
        members = members or MemberFilter()
        records = self._fetch_records(members, (MemberType.PML, MemberType.UI))
        report = self._run_batch(
            records, lambda record: self._pull_record(record, members), "pull"
        )
        self._display_summary(report)
        return report

    def _pull_record(self, record: ProductModel, members: MemberFilter) -> RecordResult:
        result = RecordResult(name=record.name, status=RecordStatus.SKIPPED)
        record_dir = self.source_path / record.name

        if members.includes_model(record.name, MemberType.PML) and record.content_id:
            self.pull_pml(record)
            result.pml_written = True
            result.status = RecordStatus.SUCCESS

        if members.includes_model(record.name, MemberType.UI):
            if not record.ui_definitions_id:
                logger.debug("%s has no UI definitions document", record.name)
                return result

            definitions = self.fetch_definitions(record)
            # A partial pull must not drop the other definitions of the record
            writer = RecordTreeWriter(
                record_dir, merge=not members.selects_all_definitions(record.name)
            )
            for ui in definitions:
                name = ui.get("name") if isinstance(ui, dict) else None
                if name is not None and not members.includes_definition(
                    record.name, name
                ):
                    result.definitions_skipped += 1
                    continue
                try:
                    writer.write_definition(ui)
                except UnrecognizedDefinitionError as e:
                    self.output.warning(f"{record.name}: {e}")
                    result.definitions_skipped += 1
                    continue
                result.definitions_written += 1
            writer.finish()
            result.status = RecordStatus.SUCCESS

        return result

    def fetch_definitions(self, record: ProductModel) -> list[Any]:
        """Download and decode the UI definitions of a record.

        Raises:
            VeloceDecodeError: If the document body cannot be decoded
            VeloceParseError: If the content is not a JSON list
        """
        body = self.client.fetch_document_body(str(record.ui_definitions_id))
        content = codec.decode(body)
        try:
            definitions = json.loads(content)
        except ValueError as e:
            raise VeloceParseError(
                f"Failed to parse document content: {record.name}"
            ) from e
        if not isinstance(definitions, list):
            raise VeloceParseError(
                f"Expected a list of UI definitions: {record.name}"
            )
        return definitions

    def pull_pml(self, record: ProductModel) -> Path:
        """Write ``{Name}.pml`` and ``{Name}.pml.json`` for a record."""
        record_dir = self.source_path / record.name
        body = self.client.fetch_document_body(str(record.content_id))
        pml = codec.decode(body)

        write_file_safe(record_dir, f"{record.name}.pml.json", dump_json(record.to_pml_dict()))
        return write_file_safe(record_dir, f"{record.name}.pml", pml)

    # =========================
    # Push
    # =========================

    def push(self, members: Optional[MemberFilter] = None) -> SyncReport:
        """Upload the UI definitions of the source tree.

        Args:
            members: Records to push (everything if omitted); definition
                names are ignored, the whole document is uploaded

        Returns:
            Report with one result per record
        """
        members = members or MemberFilter()
        records = self._fetch_records(members, (MemberType.UI,))
        if not records:
            report = SyncReport(direction="push")
            self._display_summary(report)
            return report

        # Shared by every record of the batch
        folder_id = self.client.ensure_folder(self.folder_name)
        logger.debug("Using folder %s (%s)", self.folder_name, folder_id)

        report = self._run_batch(
            records, lambda record: self._push_record(record, folder_id), "push"
        )
        self._display_summary(report)
        return report

    def _push_record(self, record: ProductModel, folder_id: str) -> RecordResult:
        result = RecordResult(name=record.name)

        if not (self.source_path / record.name).is_dir():
            logger.debug("No local sources for %s", record.name)
            result.status = RecordStatus.SKIPPED
            return result

        definitions = UiDefinitionsBuilder(self.source_path, record.name).pack()
        body = codec.encode(json.dumps(definitions, indent=2))

        document = self.client.fetch_document(record.ui_definitions_id)
        if document and document.get("Id"):
            self.client.update_document(document["Id"], body)
            result.action = "updated"
        else:
            created = self.client.create_document(folder_id, record.name, body)
            self.client.update_record(
                record.id, {UI_DEFINITIONS_FIELD: created.get("id")}
            )
            result.action = "created"

        result.definitions_written = len(definitions)
        return result

    def _display_summary(self, report: SyncReport) -> None:
        if self.output.quiet:
            return

        items = [
            ("Succeeded", str(report.count(RecordStatus.SUCCESS))),
            ("Skipped", str(report.count(RecordStatus.SKIPPED))),
            ("Failed", str(report.count(RecordStatus.FAILED))),
        ]
        if report.failed:
            items.append(("Failed records", ", ".join(r.name for r in report.failed)))
        self.output.print_summary(f"{report.direction.capitalize()} Complete", items)
