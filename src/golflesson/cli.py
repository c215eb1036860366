"""
Command line interface for golf lesson application.
"""

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from tabulate import tabulate

from golflesson.app import create_app
from golflesson.config.logging import setup_logging
from golflesson.config.logging_filters import log_performance, with_correlation_id
from golflesson.config.settings import ConfigurationManager
from golflesson.config.validation import ConfigValidationError, validate_config
from golflesson.exceptions import AuthError, LessonError, PermissionDeniedError, ValidationError
from golflesson.health import get_health_status
from golflesson.models.karte import DrillStatus
from golflesson.models.profile import Location
from golflesson.models.reservation import Reservation, ReservationStatus
from golflesson.models.user import Account, Role
from golflesson.services.cancellation_policy import PolicyDecision
from golflesson.services.email_templates import format_price
from golflesson.utils.cli_utils import (
    ArgumentValidator,
    CLIBuilder,
    CLIContext,
    CLIOptionFactory,
    CommandCategory,
    CommandMetadata,
    CommandRegistry,
    create_command_group,
)
from golflesson.utils.logging_utils import get_logger
from golflesson.utils.timezone_utils import TimezoneManager


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))

def _print_table(rows: list[list[Any]], headers: list[str], empty: str) -> None:
    if not rows:
        print(empty)
        return
    print(tabulate(rows, headers=headers, tablefmt="psql"))

def _local(ctx: CLIContext) -> TimezoneManager:
    return TimezoneManager(ctx.config.timezone)

def _format_dt(ctx: CLIContext, value: Any) -> str:
    return _local(ctx).to_local(value).strftime('%Y-%m-%d %H:%M') if value else ''

def _require_user(ctx: CLIContext) -> Account:
    if not ctx.args.user:
        raise AuthError("An acting account is required (--user)")
    return ctx.app.accounts.get(ctx.args.user)

def _require_admin(ctx: CLIContext) -> Account:
    return ctx.app.accounts.require_admin(ctx.args.user)

def _decision_dict(decision: PolicyDecision) -> dict[str, Any]:
    return {
        'tier': decision.tier.value,
        'feePercent': decision.fee_percent,
        'feeAmount': decision.fee_amount,
        'daysUntil': decision.days_until,
        'label': decision.label,
        'message': decision.message,
        'requiresApproval': decision.requires_approval,
    }

def _reservation_row(ctx: CLIContext, reservation: Reservation) -> list[Any]:
    request = reservation.cancellation_request
    return [
        reservation.id,
        reservation.status.label,
        reservation.receipt.plan_name,
        _format_dt(ctx, reservation.receipt.start_at),
        reservation.user_name,
        request.tier.value if request else '',
    ]

RESERVATION_HEADERS = ['ID', 'Status', 'Plan', 'Start', 'Customer', 'Cancel request']

@create_command_group('list', 'List commands', CommandCategory.LIST)
class ListCommands:
    """List command implementations."""

    @staticmethod
    @CommandRegistry.register(
        name='plans',
        help_text='List lesson plans',
        category=CommandCategory.LIST,
        options=[
            CLIOptionFactory.create_format_option(),
            {
                'name': '--all',
                'action': 'store_true',
                'help': 'Include unpublished plans'
            }
        ],
        parent_command='list'
    )
    def list_plans(ctx: CLIContext) -> int:
        """List the plan catalog in display order."""
        plans = ctx.app.plans.list_plans(published_only=not ctx.args.all)
        if ctx.args.format == 'json':
            _print_json([plan.to_dict() for plan in plans])
            return 0

        rows = [
            [p.id, p.name, p.category.label, format_price(p.price), f"{p.duration}分", p.max_attendees,
             'yes' if p.is_published else 'no']
            for p in plans
        ]
        _print_table(rows, ['ID', 'Name', 'Category', 'Price', 'Duration', 'Max', 'Published'], "No lesson plans found")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='schedules',
        help_text='List lesson slots',
        category=CommandCategory.LIST,
        options=[
            CLIOptionFactory.create_format_option(),
            {
                'name': '--available',
                'action': 'store_true',
                'help': 'Only show bookable slots'
            },
            CLIOptionFactory.create_datetime_option('--start', 'Earliest slot start'),
            CLIOptionFactory.create_datetime_option('--end', 'Latest slot start, exclusive')
        ],
        parent_command='list'
    )
    def list_schedules(ctx: CLIContext) -> int:
        """List slots ordered by start time."""
        schedules = ctx.app.schedules.list(
            available_only=ctx.args.available,
            start=ctx.args.start,
            end=ctx.args.end
        )
        if ctx.args.format == 'json':
            _print_json([schedule.to_dict() for schedule in schedules])
            return 0

        rows = []
        for s in schedules:
            if s.is_blocked:
                state = 'blocked'
            else:
                state = 'open' if s.is_available else 'booked'
            rows.append([
                s.id, s.lesson_plan.name, _format_dt(ctx, s.start_at), _format_dt(ctx, s.end_at),
                s.tee_off_time or '', s.location or '', state
            ])
        _print_table(rows, ['ID', 'Plan', 'Start', 'End', 'Tee-off', 'Location', 'State'], "No schedules found")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='reservations',
        help_text='List reservations',
        category=CommandCategory.LIST,
        options=[
            CLIOptionFactory.create_format_option(),
            {
                'name': '--status',
                'choices': [s.value for s in ReservationStatus],
                'help': 'Only show reservations in this status'
            },
            {
                'name': '--customer',
                'help': 'Only show reservations of this account'
            },
            {
                'name': '--pending-cancellations',
                'action': 'store_true',
                'help': 'Only show reservations with an open cancellation request'
            }
        ],
        parent_command='list'
    )
    def list_reservations(ctx: CLIContext) -> int:
        """List reservations, newest lesson first."""
        if ctx.args.pending_cancellations:
            reservations = ctx.app.reservations.list_pending_cancellations()
        else:
            reservations = ctx.app.reservations.list_reservations(
                user_id=ctx.args.customer,
                status=ReservationStatus(ctx.args.status) if ctx.args.status else None
            )

        if ctx.args.format == 'json':
            _print_json([reservation.to_dict() for reservation in reservations])
            return 0

        rows = [_reservation_row(ctx, r) for r in reservations]
        _print_table(rows, RESERVATION_HEADERS, "No reservations found")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='customers',
        help_text='List customer accounts with reservation counts',
        category=CommandCategory.LIST,
        options=[CLIOptionFactory.create_format_option()],
        parent_command='list'
    )
    def list_customers(ctx: CLIContext) -> int:
        customers = ctx.app.accounts.list_customers()
        counts = ctx.app.karte.reservation_counts()
        if ctx.args.format == 'json':
            _print_json([
                {**customer.to_dict(), 'reservationCount': counts.get(customer.id, 0)}
                for customer in customers
            ])
            return 0

        rows = [
            [c.id, c.display_name, c.email, c.phone or '', counts.get(c.id, 0)]
            for c in customers
        ]
        _print_table(rows, ['ID', 'Name', 'Email', 'Phone', 'Reservations'], "No customers found")
        return 0

@create_command_group('schedule', 'Schedule management commands', CommandCategory.MANAGE)
class ScheduleCommands:
    """Slot management for the instructor."""

    @staticmethod
    @CommandRegistry.register(
        name='create',
        help_text='Create a lesson slot',
        category=CommandCategory.MANAGE,
        options=[
            {
                'name': 'plan_id',
                'help': 'Lesson plan id'
            },
            CLIOptionFactory.create_datetime_option('--start', 'Lesson start', required=True),
            {
                'name': '--location',
                'help': 'Lesson location'
            },
            {
                'name': '--note',
                'help': 'Free text shown with the slot'
            },
            {
                'name': '--tee-off',
                'help': 'Tee-off time label (round lessons only)'
            }
        ],
        parent_command='schedule'
    )
    def create_schedule(ctx: CLIContext) -> int:
        _require_admin(ctx)
        schedule = ctx.app.schedules.create(
            ctx.args.plan_id,
            ctx.args.start,
            location=ctx.args.location,
            note=ctx.args.note,
            tee_off_time=ctx.args.tee_off
        )
        print(f"Created schedule {schedule.id}: {schedule.lesson_plan.name} "
              f"{_format_dt(ctx, schedule.start_at)} - {_format_dt(ctx, schedule.end_at)}")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='delete',
        help_text='Delete a lesson slot without active reservations',
        category=CommandCategory.MANAGE,
        options=[CLIOptionFactory.create_schedule_option()],
        parent_command='schedule'
    )
    def delete_schedule(ctx: CLIContext) -> int:
        _require_admin(ctx)
        ctx.app.schedules.delete(ctx.args.schedule_id)
        print(f"Deleted schedule {ctx.args.schedule_id}")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='availability',
        help_text='Open or block a lesson slot',
        category=CommandCategory.MANAGE,
        options=[
            CLIOptionFactory.create_schedule_option(),
            {
                'name': 'state',
                'choices': ['open', 'blocked'],
                'help': 'New block state of the slot'
            }
        ],
        parent_command='schedule'
    )
    def set_availability(ctx: CLIContext) -> int:
        _require_admin(ctx)
        schedule = ctx.app.schedules.set_availability(ctx.args.schedule_id, ctx.args.state == 'open')
        state = 'available' if schedule.is_available else 'unavailable'
        print(f"Schedule {schedule.id} is now {state}")
        return 0

@create_command_group('booking', 'Customer booking commands', CommandCategory.BOOK)
class BookingCommands:
    """Booking and cancellation from the customer's side."""

    @staticmethod
    @CommandRegistry.register(
        name='reserve',
        help_text='Request a reservation for a lesson slot',
        category=CommandCategory.BOOK,
        options=[
            CLIOptionFactory.create_schedule_option(),
            {
                'name': '--agree-policy',
                'action': 'store_true',
                'help': 'Accept the cancellation policy (required)'
            },
            {
                'name': '--agree-photo',
                'action': 'store_true',
                'help': 'Accept photo and SNS use'
            },
            {
                'name': '--concern',
                'help': 'Anything the instructor should know'
            }
        ]
    )
    def reserve(ctx: CLIContext) -> int:
        reservation_id = ctx.app.reservations.create_reservation(
            ctx.args.user,
            ctx.args.schedule_id,
            agreed_cancel_policy=ctx.args.agree_policy,
            agreed_photo_post=ctx.args.agree_photo,
            concern=ctx.args.concern
        )
        print(f"Reservation {reservation_id} requested; waiting for the instructor's approval")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='cancel',
        help_text='Preview or cancel a reservation',
        category=CommandCategory.BOOK,
        options=[
            CLIOptionFactory.create_reservation_option(),
            {
                'name': '--confirm',
                'action': 'store_true',
                'help': 'Cancel after showing the fee (default: preview only)'
            },
            CLIOptionFactory.create_reason_option(),
            CLIOptionFactory.create_format_option()
        ]
    )
    def cancel(ctx: CLIContext) -> int:
        """Show the cancellation fee, and cancel with --confirm."""
        account = _require_user(ctx)
        reservation = ctx.app.reservations.get(ctx.args.reservation_id)
        if reservation.user_id != account.id and not account.is_admin:
            raise PermissionDeniedError(
                f"Reservation {reservation.id} belongs to another account",
                {"reservation_id": reservation.id}
            )

        if not ctx.args.confirm:
            decision = ctx.app.reservations.preview_cancellation(reservation.id)
            if ctx.args.format == 'json':
                _print_json(_decision_dict(decision))
                return 0
            print(f"{decision.label}: {decision.message}")
            if decision.fee_amount:
                print(f"キャンセル料: {format_price(decision.fee_amount)}")
            print("Run again with --confirm to cancel")
            return 0

        outcome = ctx.app.reservations.request_cancellation(reservation.id, reason=ctx.args.reason)
        if ctx.args.format == 'json':
            _print_json({
                'reservationId': outcome.reservation_id,
                'status': outcome.status.value,
                'cancelled': outcome.cancelled,
                'message': outcome.message,
                'decision': _decision_dict(outcome.decision),
            })
            return 0
        print(outcome.message)
        return 0

@create_command_group('admin', 'Instructor decisions on reservations', CommandCategory.ADMIN)
class AdminCommands:
    """Reservation decisions; the acting account must be an admin."""

    @staticmethod
    @CommandRegistry.register(
        name='approve',
        help_text='Confirm a pending reservation',
        category=CommandCategory.ADMIN,
        options=[CLIOptionFactory.create_reservation_option()],
        parent_command='admin'
    )
    def approve(ctx: CLIContext) -> int:
        _require_admin(ctx)
        reservation = ctx.app.reservations.approve(ctx.args.reservation_id)
        print(f"Reservation {reservation.id} is {reservation.status.label}")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='reject',
        help_text='Reject a pending reservation',
        category=CommandCategory.ADMIN,
        options=[CLIOptionFactory.create_reservation_option(), CLIOptionFactory.create_reason_option()],
        parent_command='admin'
    )
    def reject(ctx: CLIContext) -> int:
        _require_admin(ctx)
        reservation = ctx.app.reservations.reject(ctx.args.reservation_id, ctx.args.reason)
        print(f"Reservation {reservation.id} rejected")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='approve-cancel',
        help_text='Accept a cancellation request',
        category=CommandCategory.ADMIN,
        options=[CLIOptionFactory.create_reservation_option(), CLIOptionFactory.create_reason_option()],
        parent_command='admin'
    )
    def approve_cancellation(ctx: CLIContext) -> int:
        _require_admin(ctx)
        reservation = ctx.app.reservations.approve_cancellation(ctx.args.reservation_id, ctx.args.reason)
        print(f"Reservation {reservation.id} cancelled")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='complete',
        help_text='Mark a confirmed lesson as held',
        category=CommandCategory.ADMIN,
        options=[CLIOptionFactory.create_reservation_option()],
        parent_command='admin'
    )
    def complete(ctx: CLIContext) -> int:
        _require_admin(ctx)
        reservation = ctx.app.reservations.complete(ctx.args.reservation_id)
        print(f"Reservation {reservation.id} is {reservation.status.label}")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='dismiss-cancel',
        help_text='Drop a cancellation request and keep the reservation',
        category=CommandCategory.ADMIN,
        options=[CLIOptionFactory.create_reservation_option()],
        parent_command='admin'
    )
    def dismiss_cancellation(ctx: CLIContext) -> int:
        _require_admin(ctx)
        reservation = ctx.app.reservations.dismiss_cancellation_request(ctx.args.reservation_id)
        print(f"Cancellation request of {reservation.id} dismissed")
        return 0

@create_command_group('karte', 'Customer karte commands', CommandCategory.ADMIN)
class KarteCommands:
    """Customer records kept by the instructor."""

    @staticmethod
    @CommandRegistry.register(
        name='show',
        help_text="Show a customer's karte",
        category=CommandCategory.ADMIN,
        options=[
            {
                'name': 'customer_id',
                'help': 'Customer account id'
            },
            CLIOptionFactory.create_format_option()
        ],
        parent_command='karte'
    )
    def show(ctx: CLIContext) -> int:
        _require_admin(ctx)
        detail = ctx.app.karte.get_customer_detail(ctx.args.customer_id)
        counts = detail.status_counts

        if ctx.args.format == 'json':
            _print_json({
                'account': detail.account.to_dict(),
                'statusCounts': {status.value: count for status, count in counts.items()},
                'reservations': [r.to_dict() for r in detail.reservations],
                'drills': [d.to_dict() for d in detail.drills],
                'notes': [n.to_dict() for n in detail.notes],
            })
            return 0

        account = detail.account
        print(f"\n{account.display_name} <{account.email}>" + (f" {account.phone}" if account.phone else ''))
        print(", ".join(f"{status.label}: {count}" for status, count in counts.items()))

        print("\nReservations")
        _print_table([_reservation_row(ctx, r) for r in detail.reservations], RESERVATION_HEADERS, "No reservations")

        print("\nDrills")
        _print_table(
            [[d.id, d.title, d.status.label, d.due_date.isoformat() if d.due_date else ''] for d in detail.drills],
            ['ID', 'Title', 'Status', 'Due'],
            "No drills"
        )

        print("\nNotes")
        _print_table(
            [[n.id, _format_dt(ctx, n.created_at), 'private' if n.is_private else 'shared', n.content]
             for n in detail.notes],
            ['ID', 'Created', 'Visibility', 'Content'],
            "No notes"
        )
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='add-drill',
        help_text='Assign a practice drill to a customer',
        category=CommandCategory.ADMIN,
        options=[
            {
                'name': 'customer_id',
                'help': 'Customer account id'
            },
            {
                'name': '--title',
                'required': True,
                'help': 'Drill title'
            },
            {
                'name': '--description',
                'help': 'What to practice'
            },
            {
                'name': '--video-url',
                'help': 'Reference video',
                'validator': lambda x: x.startswith(('http://', 'https://'))
            },
            CLIOptionFactory.create_date_option('--due'),
            {
                'name': '--lesson',
                'help': 'Reservation id the drill came out of'
            }
        ],
        parent_command='karte'
    )
    def add_drill(ctx: CLIContext) -> int:
        _require_admin(ctx)
        drill = ctx.app.karte.add_drill(
            ctx.args.customer_id,
            ctx.args.title,
            description=ctx.args.description,
            video_url=ctx.args.video_url,
            due_date=ctx.args.due,
            lesson_record_id=ctx.args.lesson
        )
        print(f"Assigned drill {drill.id}")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='drill-status',
        help_text='Update the progress of a drill',
        category=CommandCategory.ADMIN,
        options=[
            {
                'name': 'drill_id',
                'help': 'Drill id'
            },
            {
                'name': 'status',
                'choices': [s.value for s in DrillStatus],
                'help': 'New drill status'
            }
        ],
        parent_command='karte'
    )
    def drill_status(ctx: CLIContext) -> int:
        _require_admin(ctx)
        drill = ctx.app.karte.update_drill_status(ctx.args.drill_id, DrillStatus(ctx.args.status))
        print(f"Drill {drill.id}: {drill.status.label}")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='add-note',
        help_text='Add an instructor note to a customer',
        category=CommandCategory.ADMIN,
        options=[
            {
                'name': 'customer_id',
                'help': 'Customer account id'
            },
            {
                'name': '--content',
                'required': True,
                'help': 'Note text'
            },
            {
                'name': '--shared',
                'action': 'store_true',
                'help': 'Make the note visible to the customer'
            }
        ],
        parent_command='karte'
    )
    def add_note(ctx: CLIContext) -> int:
        _require_admin(ctx)
        note = ctx.app.karte.add_note(ctx.args.customer_id, ctx.args.content, is_private=not ctx.args.shared)
        print(f"Added note {note.id}")
        return 0

@create_command_group('accounts', 'Account directory commands', CommandCategory.MANAGE)
class AccountCommands:
    """Account maintenance run by the operator."""

    @staticmethod
    @CommandRegistry.register(
        name='add',
        help_text='Create or update an account',
        category=CommandCategory.MANAGE,
        options=[
            {
                'name': 'account_id',
                'help': 'Account id'
            },
            {
                'name': '--email',
                'required': True,
                'help': 'Email address'
            },
            {
                'name': '--name',
                'required': True,
                'help': 'Display name'
            },
            {
                'name': '--phone',
                'help': 'Phone number'
            },
            {
                'name': '--admin',
                'action': 'store_true',
                'help': 'Create the account with the admin role'
            }
        ],
        parent_command='accounts'
    )
    def add_account(ctx: CLIContext) -> int:
        account = ctx.app.accounts.register(
            ctx.args.account_id,
            ctx.args.email,
            ctx.args.name,
            role=Role.ADMIN if ctx.args.admin else Role.USER,
            phone=ctx.args.phone
        )
        print(f"Account {account.id} ({account.role.value})")
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='set-role',
        help_text='Change the role of an account',
        category=CommandCategory.MANAGE,
        options=[
            {
                'name': 'account_id',
                'help': 'Account id'
            },
            {
                'name': 'role',
                'choices': [r.value for r in Role],
                'help': 'New role'
            }
        ],
        parent_command='accounts'
    )
    def set_role(ctx: CLIContext) -> int:
        account = ctx.app.accounts.set_role(ctx.args.account_id, Role(ctx.args.role))
        print(f"Account {account.id} ({account.role.value})")
        return 0

@create_command_group('plans', 'Lesson plan catalog commands', CommandCategory.MANAGE)
class PlanCommands:
    """Plan catalog maintenance."""

    @staticmethod
    @CommandRegistry.register(
        name='seed',
        help_text='Write the default lesson plans into an empty catalog',
        category=CommandCategory.MANAGE,
        parent_command='plans'
    )
    def seed(ctx: CLIContext) -> int:
        count = ctx.app.plans.seed_defaults()
        print(f"Seeded {count} lesson plan(s)")
        return 0

def _parse_location(value: str) -> Location:
    name, sep, area = value.rpartition(':')
    if not sep or not name.strip():
        raise ValidationError(f"Invalid location {value}", {'location': "expected NAME:AREA"})
    return Location(name=name.strip(), area=area.strip())

@create_command_group('profile', 'Instructor profile commands', CommandCategory.MANAGE)
class ProfileCommands:
    """Public profile content."""

    @staticmethod
    @CommandRegistry.register(
        name='show',
        help_text='Show the instructor profile',
        category=CommandCategory.LIST,
        options=[CLIOptionFactory.create_format_option()],
        parent_command='profile'
    )
    def show(ctx: CLIContext) -> int:
        profile = ctx.app.profile.get_profile()
        if ctx.args.format == 'json':
            _print_json(profile.to_dict())
            return 0

        print(f"{profile.name} ({profile.name_en})")
        print(profile.title)
        rows = [
            ['Email', profile.email],
            ['Instagram', profile.instagram],
            ['Image', profile.image],
            ['Bio', profile.bio],
            ['Qualifications', "\n".join(profile.qualifications)],
            ['Philosophy', "\n".join(profile.teaching_philosophy)],
            ['Locations', "\n".join(f"{loc.name} ({loc.area})" for loc in profile.locations)],
        ]
        print(tabulate(rows, tablefmt="psql"))
        return 0

    @staticmethod
    @CommandRegistry.register(
        name='set',
        help_text='Update instructor profile fields; list options replace the whole list',
        category=CommandCategory.MANAGE,
        options=[
            {'name': '--name', 'help': 'Display name'},
            {'name': '--name-en', 'help': 'Name in Latin letters'},
            {'name': '--title', 'help': 'Professional title'},
            {'name': '--image', 'help': 'Portrait image path or URL'},
            {'name': '--instagram', 'help': 'Instagram handle'},
            {'name': '--email', 'help': 'Public contact address'},
            {'name': '--bio', 'help': 'Introduction text'},
            {
                'name': '--qualification',
                'action': 'append',
                'help': 'Qualification (repeatable)'
            },
            {
                'name': '--philosophy',
                'action': 'append',
                'help': 'Teaching philosophy point (repeatable)'
            },
            {
                'name': '--location',
                'action': 'append',
                'help': 'Lesson venue as NAME:AREA (repeatable)'
            }
        ],
        parent_command='profile'
    )
    def set_profile(ctx: CLIContext) -> int:
        _require_admin(ctx)
        args = ctx.args
        changes: dict[str, Any] = {
            field_name: value
            for field_name, value in (
                ('name', args.name),
                ('name_en', args.name_en),
                ('title', args.title),
                ('image', args.image),
                ('instagram', args.instagram),
                ('email', args.email),
                ('bio', args.bio),
                ('qualifications', args.qualification),
                ('teaching_philosophy', args.philosophy),
            )
            if value is not None
        }
        if args.location is not None:
            changes['locations'] = [_parse_location(value) for value in args.location]

        ctx.app.profile.save_profile(replace(ctx.app.profile.get_profile(), **changes))
        print(f"Profile updated: {', '.join(sorted(changes)) or 'no changes'}")
        return 0

@create_command_group('export', 'Export commands', CommandCategory.EXPORT)
class ExportCommands:
    """Calendar export."""

    @staticmethod
    @CommandRegistry.register(
        name='ics',
        help_text="Write a customer's lessons to an iCalendar file",
        category=CommandCategory.EXPORT,
        options=[
            {
                'name': 'customer_id',
                'help': 'Account id'
            },
            {
                'name': '--output',
                'help': 'Output file (default: <ics_dir>/<account id>.ics)'
            }
        ],
        parent_command='export'
    )
    def export_ics(ctx: CLIContext) -> int:
        calendar = ctx.app.calendar.build_calendar(ctx.args.customer_id)
        output = Path(ctx.args.output) if ctx.args.output else Path(ctx.config.ics_dir) / f"{ctx.args.customer_id}.ics"
        path = ctx.app.calendar.write_calendar(calendar, output)
        print(f"Wrote {path}")
        return 0

@create_command_group('check', 'System check commands', CommandCategory.CHECK)
class CheckCommands:
    """System check command implementations."""

    @staticmethod
    @CommandRegistry.register(
        name='check',
        help_text='Check configuration, data directory and mail setup',
        category=CommandCategory.CHECK,
        options=[CLIOptionFactory.create_format_option()]
    )
    def check_system(ctx: CLIContext) -> int:
        status = get_health_status(ctx.config, ctx.app.store)
        if ctx.args.format == 'json':
            _print_json(status)
        else:
            rows = [[c['name'], c['status'], c['message']] for c in status['checks']]
            _print_table(rows, ['Check', 'Status', 'Message'], "No checks run")
            print(f"Overall: {status['status']} (version {status['version']})")
        return 0 if status['status'] == 'healthy' else 1

COMMAND_GROUPS = [
    ListCommands,
    ScheduleCommands,
    BookingCommands,
    AdminCommands,
    KarteCommands,
    AccountCommands,
    PlanCommands,
    ProfileCommands,
    ExportCommands,
    CheckCommands,
]

def create_parser() -> argparse.ArgumentParser:
    """Create argument parser from the registered commands."""
    builder = CLIBuilder(
        description='Golf lesson reservations: booking, cancellation fees and the customer karte'
    )

    for group in COMMAND_GROUPS:
        metadata = group._command_group_metadata
        if CommandRegistry.get_subcommands(metadata['name']):
            builder.add_group(metadata['name'], metadata['help_text'])

    for command in CommandRegistry.commands():
        builder.add_command(command)

    return builder.build()

@with_correlation_id
def _execute(command: CommandMetadata, ctx: CLIContext) -> int:
    return log_performance(ctx.logger, command.key)(command.handler)(ctx)

def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)
    logger = get_logger(__name__)

    try:
        config = ConfigurationManager().load_config(args.config_dir)
        if args.data_dir:
            config.data_dir = str(Path(args.data_dir).resolve())
        validate_config(config)
    except ConfigValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config, dev_mode=args.dev, verbose=args.verbose, log_file=args.log_file)

    subcommand = getattr(args, f"{args.command}_subcommand", None)
    command = CommandRegistry.get_command(args.command, subcommand)
    if not command:
        logger.error(f"Unknown command: {args.command}")
        return 1

    errors = ArgumentValidator.validate_args(args, command)
    if errors:
        for error in errors:
            print(error, file=sys.stderr)
        return 1

    ctx = CLIContext(
        args=args,
        logger=logger,
        config=config,
        parser=parser,
        app=create_app(config)
    )

    try:
        return _execute(command, ctx)
    except LessonError as e:
        logger.debug(f"Command failed: {e.message}", extra={'details': e.details})
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1
    except Exception:
        logger.exception("Unhandled exception")
        return 1

if __name__ == '__main__':
    sys.exit(main())
