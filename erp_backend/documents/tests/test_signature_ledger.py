# documents/tests/test_signature_ledger.py

import base64
import threading
import uuid

from django.test import SimpleTestCase

from documents.domain import Document
from documents.services.exceptions import (
    AlreadyTerminal,
    DuplicateSignature,
    InvalidSignatureFormat,
    InvalidSignerRole,
)
from documents.services.signature_ledger import SignatureLedger, normalize_signature_image
from documents.stores.memory import InMemoryStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


def _purchase(state="returning", **overrides):
    values = dict(
        id=uuid.uuid4(),
        kind="purchase",
        state=state,
        tenant_id="t1",
        folio="COMP-20250101-00001",
        product_id=1,
        quantity=10,
        location_id=1,
        purchase_type="parcela",
    )
    values.update(overrides)
    return Document(**values)


class NormalizeSignatureImageTests(SimpleTestCase):
    def test_valid_data_url_is_kept(self):
        self.assertEqual(normalize_signature_image(PNG_DATA_URL), PNG_DATA_URL)

    def test_raw_png_bytes_become_data_url(self):
        self.assertEqual(normalize_signature_image(PNG_BYTES), PNG_DATA_URL)

    def test_raw_jpeg_bytes(self):
        value = normalize_signature_image(b"\xff\xd8\xff\xe0" + b"\x00" * 8)
        self.assertTrue(value.startswith("data:image/jpeg;base64,"))

    def test_webp_bytes(self):
        value = normalize_signature_image(b"RIFF\x00\x00\x00\x00WEBPVP8 ")
        self.assertTrue(value.startswith("data:image/webp;base64,"))

    def test_rejects_bad_inputs(self):
        bad_inputs = [
            "",
            "   ",
            None,
            "hello",
            "data:image/png;base64,",
            "data:image/png;base64,@@not-base64@@",
            "data:text/plain;base64,aGVsbG8=",
            b"not an image at all",
            b"",
        ]
        for value in bad_inputs:
            with self.subTest(value=value):
                with self.assertRaises(InvalidSignatureFormat):
                    normalize_signature_image(value)


class SignatureLedgerTests(SimpleTestCase):
    """
    GUARANTEES:
    - At most one signature per (document, role)
    - Nothing is stored when validation fails
    - A captured signature is visible immediately
    """

    def setUp(self):
        self.store = InMemoryStore()
        self.ledger = SignatureLedger(store=self.store)
        self.document = _purchase()

    def test_capture_then_query(self):
        record = self.ledger.capture(self.document, "proveedor", PNG_DATA_URL, captured_by_id=7)

        self.assertEqual(record.role, "proveedor")
        self.assertEqual(record.document_id, self.document.id)
        self.assertEqual(record.tenant_id, "t1")
        self.assertEqual(record.captured_by_id, 7)
        self.assertTrue(self.ledger.has_signature(self.document, "proveedor"))
        self.assertEqual(self.ledger.signed_roles(self.document), {"proveedor"})

    def test_second_capture_for_same_role_is_rejected_and_first_kept(self):
        first = self.ledger.capture(self.document, "encargado", PNG_DATA_URL)

        other = "data:image/png;base64," + base64.b64encode(b"\x89PNG\r\n\x1a\nX").decode()
        with self.assertRaises(DuplicateSignature) as ctx:
            self.ledger.capture(self.document, "encargado", other)

        self.assertEqual(ctx.exception.role, "encargado")
        self.assertEqual(ctx.exception.http_status, 409)
        stored = self.store.get("purchase", self.document.id, "encargado")
        self.assertEqual(stored.image_data, first.image_data)

    def test_invalid_format_stores_nothing(self):
        with self.assertRaises(InvalidSignatureFormat):
            self.ledger.capture(self.document, "conductor", "data:image/png;base64,")

        self.assertFalse(self.ledger.has_signature(self.document, "conductor"))

    def test_role_not_allowed_for_kind(self):
        with self.assertRaises(InvalidSignerRole):
            self.ledger.capture(self.document, "cliente", PNG_DATA_URL)

        transfer = _purchase(kind="transfer", state="pending")
        with self.assertRaises(InvalidSignerRole):
            self.ledger.capture(transfer, "encargado", PNG_DATA_URL)

    def test_terminal_document_rejects_new_signatures(self):
        done = _purchase(state="completed")
        with self.assertRaises(AlreadyTerminal):
            self.ledger.capture(done, "proveedor", PNG_DATA_URL)

    def test_missing_roles(self):
        required = {"conductor", "encargado", "proveedor"}
        self.ledger.capture(self.document, "conductor", PNG_BYTES)

        self.assertEqual(
            self.ledger.missing_roles(self.document, required), ["encargado", "proveedor"]
        )
        self.assertFalse(self.ledger.all_required_present(self.document, required))

        self.ledger.capture(self.document, "encargado", PNG_BYTES)
        self.ledger.capture(self.document, "proveedor", PNG_BYTES)
        self.assertTrue(self.ledger.all_required_present(self.document, required))

    def test_signatures_are_scoped_per_document(self):
        other = _purchase()
        self.ledger.capture(self.document, "proveedor", PNG_DATA_URL)

        self.assertFalse(self.ledger.has_signature(other, "proveedor"))
        self.ledger.capture(other, "proveedor", PNG_DATA_URL)

    def test_concurrent_captures_keep_exactly_one(self):
        records = []
        errors = []
        barrier = threading.Barrier(8)

        def worker(n):
            image = b"\x89PNG\r\n\x1a\n" + bytes([n]) * 8
            barrier.wait()
            try:
                records.append(self.ledger.capture(self.document, "conductor", image))
            except DuplicateSignature as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(records), 1)
        self.assertEqual(len(errors), 7)
        self.assertEqual(self.store.list_for("purchase", self.document.id), records)
        self.assertEqual(
            self.store.get("purchase", self.document.id, "conductor").image_data,
            records[0].image_data,
        )
