"""Booking service - the booking state machine and its capacity effects.

Every operation re-reads its booking inside ``store.atomic(session_id)`` so
the checks and the writes see one consistent view of the session's seats,
bookings and waitlist. Seat-freeing transitions run promotion before the
unit closes.
"""

import logging

from bookings.domain import (
    AttendanceStatus,
    Booking,
    BookingEvent,
    BookingId,
    BookingReference,
    BookingStatus,
    CompletionStatus,
    LearningSession,
    NominationType,
    SessionId,
    SessionStatus,
    UserId,
    WaitlistedOutcome,
    WaitlistEntry,
)
from bookings.domain.errors import (
    BookingNotFoundError,
    DuplicateBookingError,
    IneligibleUserError,
    NoManagerError,
    NoSeatsAvailableError,
    NotAuthorizedError,
    SeatTakenError,
    SessionNotBookableError,
    SessionNotFoundError,
)
from bookings.domain.transitions import SEAT_RELEASING_STATUSES, next_status
from bookings.services.capacity_service import CapacityService
from bookings.services.collaborators import (
    Clock,
    Eligibility,
    ManagerDirectory,
    NotificationKind,
    Notifier,
    notify_on_commit,
    system_clock,
)
from bookings.services.promotion_service import PromotionService
from bookings.services.waitlist_service import WaitlistService
from bookings.stores.interfaces import BookingStore

logger = logging.getLogger(__name__)

SESSION_CANCELLED_REASON = "Session cancelled"


class BookingService:
    """Service for booking lifecycle operations."""

    def __init__(
        self,
        store: BookingStore,
        eligibility: Eligibility,
        directory: ManagerDirectory,
        notifier: Notifier,
        clock: Clock = system_clock,
    ) -> None:
        self._store = store
        self._eligibility = eligibility
        self._directory = directory
        self._notifier = notifier
        self._clock = clock
        self.capacity = CapacityService(store)
        self.waitlist = WaitlistService(store, clock)
        self.promotion = PromotionService(
            store, self.capacity, self.waitlist, directory, notifier, clock
        )

    # -- lookups -----------------------------------------------------------

    def _session(self, session_id: SessionId) -> LearningSession:
        session = self._store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def get_booking(self, booking_id: BookingId) -> Booking:
        booking = self._store.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def _session_of(self, booking_id: BookingId) -> SessionId:
        return self.get_booking(booking_id).session_id

    # -- guards ------------------------------------------------------------

    def _check_bookable(self, session: LearningSession) -> None:
        if session.status is not SessionStatus.SCHEDULED:
            raise SessionNotBookableError(
                f"Session is {session.status.value.lower().replace('_', ' ')}"
            )
        if not session.is_bookable_at(self._clock()):
            raise SessionNotBookableError("Session has already started")

    def _check_no_active_booking(self, session_id: SessionId, user_id: UserId) -> None:
        if self._store.get_active_booking(session_id, user_id) is not None:
            raise DuplicateBookingError()

    def _check_seat(
        self,
        session: LearningSession,
        seat_number: int,
        ignore: BookingId | None = None,
    ) -> None:
        for booking in self._store.list_bookings(session.id):
            if booking.is_active and booking.seat_number == seat_number and booking.id != ignore:
                raise SeatTakenError(seat_number)
        session.check_seat_in_range(seat_number)

    def _check_manager(self, booking: Booking, actor: UserId, *, required: bool) -> None:
        manager = self._directory.manager_of(booking.user_id)
        if manager is None:
            if required:
                raise NoManagerError()
            return
        if manager != actor:
            logger.warning(
                "User %s is not the manager of %s for booking %s",
                actor,
                booking.user_id,
                booking.id,
            )
            raise NotAuthorizedError("Only the user's manager can perform this action")

    def _notify(self, user_id: UserId, kind: NotificationKind, booking_id: BookingId | None) -> None:
        notify_on_commit(self._store, self._notifier, user_id, kind, booking_id)

    # -- creation ----------------------------------------------------------

    def _new_booking(
        self,
        session_id: SessionId,
        user_id: UserId,
        status: BookingStatus,
        **fields,
    ) -> Booking:
        booking = Booking(
            id=BookingId.new(),
            reference=BookingReference.generate(),
            session_id=session_id,
            user_id=user_id,
            status=status,
            booked_at=self._clock(),
            **fields,
        )
        self._store.save_booking(booking)
        return booking

    def create_booking(
        self,
        user_id: UserId,
        session_id: SessionId,
        seat_number: int | None = None,
        notes: str | None = None,
    ) -> Booking | WaitlistedOutcome:
        """Book a seat, or queue the user when the session is full.

        Returns a PENDING_APPROVAL booking when the user has a manager, a
        CONFIRMED one when they do not, and a WaitlistedOutcome (no booking
        record) when there is no free seat.
        """
        with self._store.atomic(session_id):
            session = self._session(session_id)
            if not self._eligibility.is_eligible(user_id, session):
                raise IneligibleUserError()
            self._check_no_active_booking(session_id, user_id)
            self._check_bookable(session)
            if seat_number is not None:
                self._check_seat(session, seat_number)

            if not session.has_available_seats():
                entry = self.waitlist.join(session_id, user_id, notes)
                self._notify(user_id, NotificationKind.BOOKING_WAITLISTED, None)
                return WaitlistedOutcome(entry)

            self.capacity.decrement_available(session_id)
            needs_approval = self._directory.manager_of(user_id) is not None
            now = self._clock()
            booking = self._new_booking(
                session_id,
                user_id,
                BookingStatus.PENDING_APPROVAL if needs_approval else BookingStatus.CONFIRMED,
                seat_number=seat_number,
                notes=notes,
                confirmed_at=None if needs_approval else now,
            )
            self._drop_waiting_entry(session_id, user_id)

        logger.info(
            "Booking %s created for user %s in session %s with status %s",
            booking.id,
            user_id,
            session_id,
            booking.status.value,
        )
        if not needs_approval:
            self._notify(user_id, NotificationKind.BOOKING_CONFIRMED, booking.id)
        return booking

    def _drop_waiting_entry(self, session_id: SessionId, user_id: UserId) -> None:
        # A user who books directly no longer needs their place in the queue.
        for entry in self._store.list_waiting(session_id):
            if entry.user_id == user_id:
                self.waitlist.consume(entry)
                self.waitlist.reorder(session_id)
                return

    def accept_recommendation(
        self, user_id: UserId, session_id: SessionId, notes: str | None = None
    ) -> Booking:
        """Turn an accepted recommendation into a PENDING booking with no seat."""
        with self._store.atomic(session_id):
            session = self._session(session_id)
            self._check_no_active_booking(session_id, user_id)
            self._check_bookable(session)
            if not session.has_available_seats():
                raise NoSeatsAvailableError()
            booking = self._new_booking(
                session_id,
                user_id,
                BookingStatus.PENDING,
                nomination_type=NominationType.RECOMMENDED,
                notes=notes,
            )
        logger.info("Recommendation accepted by user %s for session %s", user_id, session_id)
        return booking

    def book_mandatory_nomination(
        self, user_id: UserId, session_id: SessionId, notes: str | None = None
    ) -> Booking:
        """Confirm a mandatory nomination on the lowest free seat."""
        with self._store.atomic(session_id):
            session = self._session(session_id)
            self._check_no_active_booking(session_id, user_id)
            self._check_bookable(session)
            if not session.has_available_seats():
                raise NoSeatsAvailableError()

            seat_number = self._lowest_free_seat(session)
            self.capacity.decrement_available(session_id)
            booking = self._new_booking(
                session_id,
                user_id,
                BookingStatus.CONFIRMED,
                seat_number=seat_number,
                nomination_type=NominationType.MANDATORY,
                notes=notes,
                confirmed_at=self._clock(),
            )
            self._drop_waiting_entry(session_id, user_id)

        logger.info(
            "Mandatory booking %s for user %s in session %s on seat %s",
            booking.id,
            user_id,
            session_id,
            seat_number,
        )
        self._notify(user_id, NotificationKind.BOOKING_CONFIRMED, booking.id)
        return booking

    def _lowest_free_seat(self, session: LearningSession) -> int | None:
        if session.total_seats is None:
            return None
        taken = set(self.booked_seats(session.id))
        for seat in range(1, session.total_seats + 1):
            if seat not in taken:
                return seat
        raise NoSeatsAvailableError()

    # -- approval ----------------------------------------------------------

    def approve(self, booking_id: BookingId, approver_id: UserId) -> Booking:
        """Confirm a PENDING or PENDING_APPROVAL booking.

        A PENDING booking has not taken a seat yet, so approving it needs a
        free seat and takes one.
        """
        with self._store.atomic(self._session_of(booking_id)):
            booking = self.get_booking(booking_id)
            self._check_manager(booking, approver_id, required=False)
            approved = booking.approve(approver_id, self._clock())
            if booking.status is BookingStatus.PENDING:
                if not self.capacity.has_available_seats(booking.session_id):
                    raise NoSeatsAvailableError()
                self.capacity.decrement_available(booking.session_id)
            self._store.save_booking(approved)

        logger.info("Booking %s approved by %s", booking_id, approver_id)
        self._notify(approved.user_id, NotificationKind.BOOKING_APPROVED, approved.id)
        return approved

    def reject(self, booking_id: BookingId, rejecter_id: UserId, reason: str | None = None) -> Booking:
        """Reject a PENDING_APPROVAL booking, release its seat and promote."""
        with self._store.atomic(self._session_of(booking_id)):
            booking = self.get_booking(booking_id)
            self._check_manager(booking, rejecter_id, required=False)
            rejected = booking.reject(rejecter_id, reason, self._clock())
            self._store.save_booking(rejected)
            self._release_seat(booking)
            self.promotion.process(booking.session_id)

        logger.info("Booking %s rejected by %s", booking_id, rejecter_id)
        self._notify(rejected.user_id, NotificationKind.BOOKING_REJECTED, rejected.id)
        return rejected

    # -- seats -------------------------------------------------------------

    def select_seat(self, booking_id: BookingId, seat_number: int) -> Booking:
        """Confirm a PENDING booking by picking a seat."""
        with self._store.atomic(self._session_of(booking_id)):
            booking = self.get_booking(booking_id)
            confirmed = booking.select_seat(seat_number, self._clock())
            session = self._session(booking.session_id)
            self._check_seat(session, seat_number, ignore=booking.id)
            if not session.has_available_seats():
                raise NoSeatsAvailableError()
            self.capacity.decrement_available(booking.session_id)
            self._store.save_booking(confirmed)

        logger.info("Seat %s selected for booking %s", seat_number, booking_id)
        self._notify(confirmed.user_id, NotificationKind.BOOKING_CONFIRMED, confirmed.id)
        return confirmed

    def change_seat(self, booking_id: BookingId, seat_number: int) -> Booking:
        with self._store.atomic(self._session_of(booking_id)):
            booking = self.get_booking(booking_id)
            changed = booking.change_seat(seat_number)
            self._check_seat(self._session(booking.session_id), seat_number, ignore=booking.id)
            self._store.save_booking(changed)

        logger.info(
            "Booking %s moved from seat %s to seat %s",
            booking_id,
            booking.seat_number,
            seat_number,
        )
        return changed

    def seat_map(self, session_id: SessionId) -> dict[int, BookingStatus]:
        """Seat number -> status of the active booking holding it."""
        self._session(session_id)
        return {
            booking.seat_number: booking.status
            for booking in self._store.list_bookings(session_id)
            if booking.is_active and booking.seat_number is not None
        }

    def booked_seats(self, session_id: SessionId) -> list[int]:
        return sorted(self.seat_map(session_id))

    # -- cancellation ------------------------------------------------------

    def _release_seat(self, previous: Booking) -> None:
        if previous.status in SEAT_RELEASING_STATUSES:
            self.capacity.increment_available(previous.session_id)

    def cancel(
        self,
        booking_id: BookingId,
        reason: str | None = None,
        cancelled_by: UserId | None = None,
    ) -> Booking:
        """Cancel a non-terminal booking.

        If the booking held a seat, the seat is released and the waitlist is
        promoted in the same unit. When ``cancelled_by`` is given it must be
        the booking's owner or their manager.
        """
        with self._store.atomic(self._session_of(booking_id)):
            booking = self.get_booking(booking_id)
            if cancelled_by is not None and cancelled_by not in (
                booking.user_id,
                self._directory.manager_of(booking.user_id),
            ):
                raise NotAuthorizedError("You can only cancel your own bookings")
            cancelled = self._cancel_in_unit(booking, reason)

        logger.info("Booking %s cancelled", booking_id)
        return cancelled

    def _cancel_in_unit(self, booking: Booking, reason: str | None) -> Booking:
        cancelled = booking.cancel(reason, self._clock())
        self._store.save_booking(cancelled)
        if booking.status in SEAT_RELEASING_STATUSES:
            self._release_seat(booking)
            self.migrate_legacy_waitlist(booking.session_id)
            self.promotion.process(booking.session_id)
        self._notify(cancelled.user_id, NotificationKind.BOOKING_CANCELLED, cancelled.id)
        return cancelled

    def request_cancellation(
        self, booking_id: BookingId, requester_id: UserId, reason: str | None = None
    ) -> Booking:
        """Ask to cancel a CONFIRMED booking.

        Mandatory nominations of users with a manager go to PENDING_CANCELLATION
        for the manager to decide. Every other booking is cancelled directly.
        """
        with self._store.atomic(self._session_of(booking_id)):
            booking = self.get_booking(booking_id)
            if booking.user_id != requester_id:
                raise NotAuthorizedError("You can only cancel your own bookings")
            next_status(booking.status, BookingEvent.REQUEST_CANCELLATION)

            if booking.is_mandatory and self._directory.manager_of(booking.user_id) is not None:
                requested = booking.request_cancellation(reason, self._clock())
                self._store.save_booking(requested)
                logger.info("Cancellation requested for booking %s", booking_id)
                return requested

            cancelled = self._cancel_in_unit(booking, reason)

        logger.info("Booking %s cancelled on request", booking_id)
        return cancelled

    def approve_cancellation(self, booking_id: BookingId, manager_id: UserId) -> Booking:
        with self._store.atomic(self._session_of(booking_id)):
            booking = self.get_booking(booking_id)
            self._check_manager(booking, manager_id, required=True)
            cancelled = booking.approve_cancellation(self._clock())
            self._store.save_booking(cancelled)
            self._release_seat(booking)
            self.migrate_legacy_waitlist(booking.session_id)
            self.promotion.process(booking.session_id)

        logger.info("Cancellation of booking %s approved by %s", booking_id, manager_id)
        self._notify(cancelled.user_id, NotificationKind.CANCELLATION_APPROVED, cancelled.id)
        return cancelled

    def reject_cancellation(
        self, booking_id: BookingId, manager_id: UserId, reason: str | None = None
    ) -> Booking:
        with self._store.atomic(self._session_of(booking_id)):
            booking = self.get_booking(booking_id)
            self._check_manager(booking, manager_id, required=True)
            restored = booking.reject_cancellation(manager_id, reason, self._clock())
            self._store.save_booking(restored)

        logger.info("Cancellation of booking %s rejected by %s", booking_id, manager_id)
        self._notify(restored.user_id, NotificationKind.CANCELLATION_REJECTED, restored.id)
        return restored

    def cancel_bookings_for_session(
        self, session_id: SessionId, reason: str = SESSION_CANCELLED_REASON
    ) -> int:
        """Cancel every open booking and waitlist entry of a session.

        Seats are returned but nobody is promoted: the session itself is
        marked CANCELLED. Returns the number of bookings cancelled.
        """
        with self._store.atomic(session_id):
            self._session(session_id)
            now = self._clock()
            cancelled = []
            for booking in self._store.list_bookings(session_id):
                if booking.status.is_terminal:
                    continue
                self._store.save_booking(booking.cancel(reason, now))
                self._release_seat(booking)
                cancelled.append(booking)
            self.waitlist.cancel_all_for_session(session_id)
            session = self._session(session_id)
            self._store.save_session(session.with_status(SessionStatus.CANCELLED))
            for booking in cancelled:
                self._notify(booking.user_id, NotificationKind.BOOKING_CANCELLED, booking.id)

        logger.info("Cancelled %s bookings for session %s", len(cancelled), session_id)
        return len(cancelled)

    # -- waitlist hooks ----------------------------------------------------

    def waiting_list(self, session_id: SessionId) -> list[WaitlistEntry]:
        self._session(session_id)
        return self.waitlist.waiting(session_id)

    def process_promotion(self, session_id: SessionId) -> list[Booking]:
        return self.promotion.process(session_id)

    def migrate_legacy_waitlist(self, session_id: SessionId) -> int:
        """Move legacy WAITLISTED bookings into the waitlist queue.

        Rows are queued in booking order and then deleted, so running this
        again finds nothing to do. Users already queued, or holding an
        active booking, are not queued twice.
        """
        with self._store.atomic(session_id):
            legacy = self._store.list_bookings(
                session_id, statuses=frozenset({BookingStatus.WAITLISTED})
            )
            for booking in legacy:
                self._store.delete_booking(booking.id)
                if self._store.has_waitlist_entry(session_id, booking.user_id):
                    continue
                if self._store.get_active_booking(session_id, booking.user_id) is not None:
                    continue
                self.waitlist.enqueue(session_id, booking.user_id, booking.notes)

        if legacy:
            logger.info("Migrated %s legacy waitlisted bookings for session %s", len(legacy), session_id)
        return len(legacy)

    # -- attendance, completion, feedback ----------------------------------

    def can_rebook(self, user_id: UserId, session_id: SessionId) -> bool:
        return self._store.get_active_booking(session_id, user_id) is None

    def mark_attendance(self, booking_id: BookingId, attendance: AttendanceStatus) -> Booking:
        with self._store.atomic(self._session_of(booking_id)):
            updated = self.get_booking(booking_id).mark_attendance(attendance, self._clock())
            self._store.save_booking(updated)
        logger.info("Attendance for booking %s marked %s", booking_id, attendance.value)
        return updated

    def mark_completion(self, booking_id: BookingId, completion: CompletionStatus) -> Booking:
        with self._store.atomic(self._session_of(booking_id)):
            updated = self.get_booking(booking_id).mark_completion(completion, self._clock())
            self._store.save_booking(updated)
        logger.info("Completion for booking %s marked %s", booking_id, completion.value)
        return updated

    def submit_feedback(self, booking_id: BookingId, rating: int, comments: str | None = None) -> Booking:
        with self._store.atomic(self._session_of(booking_id)):
            updated = self.get_booking(booking_id).with_feedback(rating, comments)
            self._store.save_booking(updated)
        return updated

    def mark_manager_notified(self, booking_id: BookingId) -> Booking:
        with self._store.atomic(self._session_of(booking_id)):
            updated = self.get_booking(booking_id).with_manager_notified(self._clock())
            self._store.save_booking(updated)
        return updated
