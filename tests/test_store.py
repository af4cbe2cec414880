import threading
import unittest
from datetime import date, datetime, time
from decimal import Decimal

from records import (
    AppointmentInput,
    AppointmentStore,
    BillingInput,
    BillingStore,
    ConflictError,
    DuplicateRecordError,
    NotFoundError,
    Patient,
    PatientInput,
    RecordStore,
)


def booking(provider: str, start: str, patient: str = "P1", reason: str = "") -> AppointmentInput:
    return AppointmentInput(
        patient=patient,
        provider=provider,
        start_time=datetime.fromisoformat(start),
        reason=reason,
    )


class AppointmentStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = AppointmentStore()

    def test_create_assigns_first_id(self) -> None:
        appointment = self.store.create(booking("Dr. A", "2024-01-01T09:00"))

        self.assertEqual(appointment.id, 1)
        self.assertEqual(appointment.provider, "Dr. A")
        self.assertEqual(self.store.list(), [appointment])

    def test_create_rejects_same_provider_and_time(self) -> None:
        first = self.store.create(booking("Dr. A", "2024-01-01T09:00", patient="P1"))

        with self.assertRaises(ConflictError) as ctx:
            self.store.create(booking("Dr. A", "2024-01-01T09:00", patient="P2"))

        self.assertIs(ctx.exception.existing, first)
        self.assertEqual(len(self.store), 1)

    def test_different_providers_share_a_time(self) -> None:
        first = self.store.create(booking("Dr. A", "2024-01-01T09:00"))
        second = self.store.create(booking("Dr. B", "2024-01-01T09:00"))

        self.assertEqual((first.id, second.id), (1, 2))
        self.assertEqual(len(self.store), 2)

    def test_update_excludes_itself_from_conflict_check(self) -> None:
        appointment = self.store.create(booking("Dr. A", "2024-01-01T09:00"))

        updated = self.store.update(1, booking("Dr. A", "2024-01-01T10:00", reason="follow-up"))
        same_slot = self.store.update(1, booking("Dr. A", "2024-01-01T10:00", reason="moved"))

        self.assertIs(updated, appointment)
        self.assertIs(same_slot, appointment)
        self.assertEqual(appointment.id, 1)
        self.assertEqual(appointment.start_time, datetime(2024, 1, 1, 10, 0))
        self.assertEqual(appointment.reason, "moved")

    def test_update_conflict_leaves_record_unchanged(self) -> None:
        self.store.create(booking("Dr. A", "2024-01-01T09:00"))
        second = self.store.create(booking("Dr. A", "2024-01-01T10:00", patient="P2"))

        with self.assertRaises(ConflictError):
            self.store.update(second.id, booking("Dr. A", "2024-01-01T09:00", patient="P3"))

        self.assertEqual(second.patient, "P2")
        self.assertEqual(second.start_time, datetime(2024, 1, 1, 10, 0))

    def test_update_missing_record_raises_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.store.update(99, booking("Dr. A", "2024-01-01T09:00"))

        self.assertEqual(ctx.exception.record_id, 99)
        self.assertEqual(self.store.list(), [])

    def test_delete_is_idempotent(self) -> None:
        appointment = self.store.create(booking("Dr. A", "2024-01-01T09:00"))

        self.store.delete(appointment.id)
        self.store.delete(appointment.id)

        self.assertNotIn(appointment.id, self.store)
        self.assertEqual(self.store.list(), [])

    def test_deleted_slot_can_be_rebooked(self) -> None:
        appointment = self.store.create(booking("Dr. A", "2024-01-01T09:00"))
        self.store.delete(appointment.id)

        rebooked = self.store.create(booking("Dr. A", "2024-01-01T09:00", patient="P2"))

        self.assertEqual(rebooked.patient, "P2")

    def test_ids_are_not_reused_after_delete(self) -> None:
        for hour in (9, 10, 11):
            self.store.create(booking("Dr. A", f"2024-01-01T{hour:02d}:00"))
        self.store.delete(2)

        created = self.store.create(booking("Dr. A", "2024-01-01T12:00"))

        self.assertEqual(created.id, 4)
        ids = [record.id for record in self.store.list()]
        self.assertEqual(ids, [1, 3, 4])

    def test_list_filters_by_date_in_insertion_order(self) -> None:
        late = self.store.create(booking("Dr. A", "2024-01-01T15:00"))
        self.store.create(booking("Dr. A", "2024-01-02T09:00"))
        early = self.store.create(booking("Dr. B", "2024-01-01T08:00"))

        self.assertEqual(self.store.list("2024-01-01"), [late, early])
        self.assertEqual(self.store.list(date(2024, 1, 1)), [late, early])
        self.assertEqual(len(self.store.list()), 3)

    def test_no_conflicts_survive_a_create_sequence(self) -> None:
        requests = [
            ("Dr. A", "2024-01-01T09:00"),
            ("Dr. A", "2024-01-01T09:00"),
            ("Dr. B", "2024-01-01T09:00"),
            ("Dr. A", "2024-01-01T09:30"),
            ("Dr. B", "2024-01-01T09:00"),
        ]
        for provider, start in requests:
            try:
                self.store.create(booking(provider, start))
            except ConflictError:
                pass

        keys = [(record.provider, record.start_time) for record in self.store.list()]
        self.assertEqual(len(keys), len(set(keys)))
        self.assertEqual(len(keys), 3)

    def test_open_slots_skip_booked_times_for_provider(self) -> None:
        self.store.create(booking("Dr. A", "2024-01-01T09:00"))
        self.store.create(booking("Dr. A", "2024-01-01T13:00"))
        self.store.create(booking("Dr. B", "2024-01-01T10:00"))

        slots = self.store.open_slots("Dr. A", date(2024, 1, 1))

        self.assertNotIn(time(9, 0), slots)
        self.assertNotIn(time(13, 0), slots)
        self.assertIn(time(10, 0), slots)
        self.assertEqual(len(slots), 6)

    def test_load_keeps_id_and_advances_counter(self) -> None:
        loaded = self.store.load(10, booking("Dr. A", "2024-01-01T09:00"))
        created = self.store.create(booking("Dr. A", "2024-01-01T10:00"))

        self.assertEqual(loaded.id, 10)
        self.assertEqual(created.id, 11)

    def test_load_rejects_taken_id(self) -> None:
        self.store.create(booking("Dr. A", "2024-01-01T09:00"))

        with self.assertRaises(DuplicateRecordError):
            self.store.load(1, booking("Dr. B", "2024-01-01T09:00"))

        self.assertEqual(len(self.store), 1)

    def test_load_enforces_conflict_rule(self) -> None:
        self.store.create(booking("Dr. A", "2024-01-01T09:00"))

        with self.assertRaises(ConflictError):
            self.store.load(5, booking("Dr. A", "2024-01-01T09:00"))

    def test_concurrent_creates_book_a_slot_once(self) -> None:
        workers = 8
        for trial in range(50):
            store = AppointmentStore()
            barrier = threading.Barrier(workers)
            outcomes = []

            def book() -> None:
                barrier.wait()
                try:
                    store.create(booking("Dr. A", "2024-01-01T09:00"))
                except ConflictError:
                    outcomes.append("conflict")
                else:
                    outcomes.append("booked")

            threads = [threading.Thread(target=book) for _ in range(workers)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            with self.subTest(trial=trial):
                self.assertEqual(outcomes.count("booked"), 1)
                self.assertEqual(len(store), 1)


class RecordStoreTests(unittest.TestCase):
    def test_generic_store_crud(self) -> None:
        store: RecordStore[Patient] = RecordStore(Patient, name="patients")

        patient = store.create(PatientInput(name="Ana", age=40, gender="Female", condition="Asthma"))
        store.update(patient.id, PatientInput(name="Ana", age=41, gender="Female", condition="Asthma"))

        self.assertEqual(store.get(patient.id).age, 41)
        store.delete(patient.id)
        with self.assertRaises(NotFoundError):
            store.get(patient.id)

    def test_billing_total_balance(self) -> None:
        store = BillingStore()
        store.create(BillingInput(patient="Ana", balance=Decimal("120.50")))
        store.create(BillingInput(patient="Ben", balance=Decimal("79.50")))

        self.assertEqual(store.total_balance(), Decimal("200.00"))

    def test_empty_billing_total_is_zero(self) -> None:
        self.assertEqual(BillingStore().total_balance(), Decimal("0.00"))


if __name__ == "__main__":
    unittest.main()
