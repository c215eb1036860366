"""HTML email templates for reservation notifications."""

from dataclasses import dataclass
from datetime import datetime
from html import escape

from golflesson.models.lesson_plan import LessonCategory
from golflesson.models.reservation import BookingReceipt, Reservation
from golflesson.services.cancellation_policy import PolicyDecision
from golflesson.utils.timezone_utils import DEFAULT_TIMEZONE, TimezoneManager


WEEKDAYS = "月火水木金土日"

LABEL_STYLE = "padding:6px 0;color:#a8a29e;width:80px;vertical-align:top;"
VALUE_STYLE = "padding:6px 0;"
BUTTON_STYLE = (
    "display:inline-block;background:#292524;color:#fff;text-decoration:none;"
    "padding:12px 28px;border-radius:999px;font-size:13px;font-weight:500;"
)

@dataclass(frozen=True)
class EmailMessage:
    """Rendered email."""
    subject: str
    html: str

def _wrap(content: str, year: int) -> str:
    return f"""
<!DOCTYPE html>
<html lang="ja">
<head><meta charset="utf-8"></head>
<body style="margin:0;padding:0;background:#f5f5f4;font-family:'Helvetica Neue',Arial,'Hiragino Sans',sans-serif;">
  <div style="max-width:560px;margin:0 auto;padding:40px 20px;">
    <div style="background:#fff;border-radius:16px;overflow:hidden;box-shadow:0 1px 3px rgba(0,0,0,0.06);">
      <div style="background:#292524;padding:24px 28px;">
        <p style="margin:0;color:#a8a29e;font-size:10px;letter-spacing:0.15em;text-transform:uppercase;">Mayumi Okumura</p>
        <p style="margin:4px 0 0;color:#fff;font-size:16px;font-weight:600;">Official HP</p>
      </div>
      <div style="padding:28px;">
        {content}
      </div>
    </div>
    <p style="text-align:center;color:#a8a29e;font-size:11px;margin-top:24px;">
      &copy; {year} Soichi, Inc. All rights reserved.
    </p>
  </div>
</body>
</html>"""

def _row(label: str, value: str | None, value_style: str = VALUE_STYLE) -> str:
    if not value:
        return ""
    return f"""
          <tr>
            <td style="{LABEL_STYLE}">{label}</td>
            <td style="{value_style}">{value}</td>
          </tr>"""

def _table(rows: str, background: str = "#fafaf9") -> str:
    return f"""
      <div style="background:{background};border-radius:12px;padding:20px;margin-bottom:24px;">
        <table style="width:100%;border-collapse:collapse;font-size:13px;color:#44403c;">{rows}
        </table>
      </div>"""

def _heading(title: str, lead: str | None = None) -> str:
    html = f"""
      <h2 style="margin:0 0 8px;color:#292524;font-size:18px;font-weight:500;">
        {title}
      </h2>"""
    if lead:
        html += f"""
      <p style="margin:0 0 24px;color:#78716c;font-size:14px;line-height:1.7;">
        {lead}
      </p>"""
    return html

def _button(url: str, text: str) -> str:
    return f"""
      <a href="{escape(url)}" style="{BUTTON_STYLE}">
        {text}
      </a>"""

def format_price(price: int) -> str:
    return f"¥{price:,}（税込）"

class EmailTemplates:
    """Builds the customer and admin notification emails."""

    def __init__(self, app_url: str, timezone: str = DEFAULT_TIMEZONE):
        self.app_url = app_url.rstrip('/')
        self.tz = TimezoneManager(timezone)

    @property
    def mypage_url(self) -> str:
        return f"{self.app_url}/mypage/reservations"

    @property
    def admin_url(self) -> str:
        return f"{self.app_url}/admin/mayumi/reservations"

    def format_date(self, value: datetime) -> str:
        """Date as ``2025年3月8日（土）`` in the business timezone."""
        local = self.tz.to_local(value)
        return f"{local.year}年{local.month}月{local.day}日（{WEEKDAYS[local.weekday()]}）"

    def format_time_range(self, receipt: BookingReceipt) -> str:
        start = self.tz.to_local(receipt.start_at)
        end = self.tz.to_local(receipt.end_at)
        return f"{start:%H:%M} – {end:%H:%M}"

    def _wrap(self, content: str) -> str:
        return _wrap(content, self.tz.now().year)

    def _lesson_rows(self, receipt: BookingReceipt, with_price: bool = True) -> str:
        date_str = self.format_date(receipt.start_at)
        rows = _row("プラン", escape(receipt.plan_name))
        rows += _row("日時", f"{date_str} {self.format_time_range(receipt)}")
        rows += _row("ティーオフ", escape(receipt.tee_off_time or ""), VALUE_STYLE + "font-weight:500;color:#d97706;")
        rows += _row("場所", escape(receipt.location or ""))
        if with_price:
            rows += _row("料金", format_price(receipt.price), VALUE_STYLE + "font-weight:600;")
        return rows

    def reservation_request(self, reservation: Reservation) -> EmailMessage:
        """Request received, to the customer."""
        receipt = reservation.receipt
        date_str = self.format_date(receipt.start_at)
        kind = "ラウンドレッスン" if receipt.category is LessonCategory.ROUND else "インドアレッスン"

        rows = _row("種別", kind, VALUE_STYLE + "font-weight:500;")
        rows += _row("プラン", escape(receipt.plan_name))
        rows += _row("日時", f"{date_str}<br>{self.format_time_range(receipt)}（{receipt.duration}分）")
        rows += _row("ティーオフ", escape(receipt.tee_off_time or ""), VALUE_STYLE + "font-weight:500;color:#d97706;")
        rows += _row("場所", escape(receipt.location or ""))
        rows += _row("備考", escape(receipt.note or ""))
        rows += _row("料金", format_price(receipt.price), VALUE_STYLE + "font-weight:600;")

        concern = ""
        if reservation.concern:
            concern = f"""
      <div style="background:#fffbeb;border-radius:12px;padding:16px;margin-bottom:24px;">
        <p style="margin:0 0 4px;color:#a8a29e;font-size:11px;text-transform:uppercase;letter-spacing:0.1em;">お悩み・ご質問</p>
        <p style="margin:0;color:#44403c;font-size:13px;line-height:1.7;">{escape(reservation.concern)}</p>
      </div>"""

        content = (
            _heading(
                "予約リクエストを受け付けました",
                "以下のレッスンについて予約リクエストを受け付けました。<br>\n"
                "        講師が確認のうえ、承認しましたらメールにてお知らせいたします。"
            )
            + _table(rows)
            + concern
            + _button(self.mypage_url, "予約状況を確認する")
            + """
      <p style="margin:24px 0 0;color:#a8a29e;font-size:12px;line-height:1.6;">
        ※このメールは自動送信です。心当たりのない場合はお手数ですがご連絡ください。
      </p>"""
        )
        return EmailMessage(
            subject=f"【予約リクエスト受付】{date_str} {receipt.plan_name}",
            html=self._wrap(content),
        )

    def reservation_confirmed(self, reservation: Reservation) -> EmailMessage:
        """Reservation approved, to the customer."""
        receipt = reservation.receipt
        content = (
            _heading(
                "予約が確定しました",
                "以下のレッスンの予約が確定しました。<br>\n"
                "        当日お会いできることを楽しみにしています！"
            )
            + _table(self._lesson_rows(receipt), "#f0fdf4")
            + _button(self.mypage_url, "マイページで確認する")
        )
        return EmailMessage(
            subject=f"【予約確定】{self.format_date(receipt.start_at)} {receipt.plan_name}",
            html=self._wrap(content),
        )

    def reservation_rejected(self, reservation: Reservation) -> EmailMessage:
        """Request declined by the instructor, to the customer."""
        receipt = reservation.receipt
        rows = self._lesson_rows(receipt, with_price=False)
        rows += _row("理由", escape(reservation.cancel_reason or ""))
        content = (
            _heading(
                "予約リクエストをお受けできませんでした",
                "誠に申し訳ございませんが、以下のレッスンの予約リクエストをお受けできませんでした。<br>\n"
                "        別の日程でのご予約をご検討ください。"
            )
            + _table(rows)
            + _button(f"{self.app_url}/schedule", "空き状況を確認する")
        )
        return EmailMessage(
            subject=f"【予約不成立】{self.format_date(receipt.start_at)} {receipt.plan_name}",
            html=self._wrap(content),
        )

    def reservation_cancelled(self, reservation: Reservation, decision: PolicyDecision | None = None) -> EmailMessage:
        """Cancellation completed, to the customer."""
        receipt = reservation.receipt
        rows = self._lesson_rows(receipt, with_price=False)
        if decision is not None and decision.fee_amount:
            rows += _row("キャンセル料", format_price(decision.fee_amount), VALUE_STYLE + "font-weight:600;")
        rows += _row("理由", escape(reservation.cancel_reason or ""))
        content = (
            _heading("キャンセルが完了しました", "以下のレッスンのキャンセルが完了しました。")
            + _table(rows)
            + _button(self.mypage_url, "マイページで確認する")
        )
        return EmailMessage(
            subject=f"【キャンセル完了】{self.format_date(receipt.start_at)} {receipt.plan_name}",
            html=self._wrap(content),
        )

    def cancellation_requested(self, reservation: Reservation, decision: PolicyDecision) -> EmailMessage:
        """Cancellation request received, to the customer."""
        receipt = reservation.receipt
        rows = self._lesson_rows(receipt)
        rows += _row("区分", escape(decision.label), VALUE_STYLE + "font-weight:500;")
        if decision.fee_amount is not None:
            rows += _row("キャンセル料", format_price(decision.fee_amount), VALUE_STYLE + "font-weight:600;")
        content = (
            _heading(
                "キャンセルリクエストを受け付けました",
                f"{escape(decision.message)}<br>\n"
                "        講師の承認をもってキャンセルが確定します。"
            )
            + _table(rows, "#fffbeb")
            + _button(self.mypage_url, "予約状況を確認する")
        )
        return EmailMessage(
            subject=f"【キャンセルリクエスト受付】{self.format_date(receipt.start_at)} {receipt.plan_name}",
            html=self._wrap(content),
        )

    def admin_new_reservation(self, reservation: Reservation) -> EmailMessage:
        """New booking request, to every admin."""
        receipt = reservation.receipt
        date_str = self.format_date(receipt.start_at)
        customer = (
            f"{escape(reservation.user_name)}<br>"
            f'<span style="color:#78716c;font-weight:normal;">{escape(reservation.user_email)}</span>'
        )
        rows = _row("お客様", customer, VALUE_STYLE + "font-weight:500;")
        rows += self._lesson_rows(receipt, with_price=False)
        rows += _row("相談内容", escape(reservation.concern or ""))
        content = (
            _heading("新しい予約リクエストが入りました")
            + _table(rows)
            + _button(self.admin_url, "管理画面で確認する")
        )
        return EmailMessage(
            subject=f"【新規予約リクエスト】{reservation.user_name} - {date_str}",
            html=self._wrap(content),
        )

    def admin_cancellation_requested(self, reservation: Reservation, decision: PolicyDecision) -> EmailMessage:
        """Customer asked to cancel inside the fee window, to every admin."""
        receipt = reservation.receipt
        date_str = self.format_date(receipt.start_at)
        rows = _row("お客様", escape(reservation.user_name), VALUE_STYLE + "font-weight:500;")
        rows += self._lesson_rows(receipt)
        rows += _row("区分", escape(decision.label))
        if decision.fee_amount is not None:
            rows += _row("キャンセル料", format_price(decision.fee_amount), VALUE_STYLE + "font-weight:600;")
        request = reservation.cancellation_request
        rows += _row("理由", escape(request.reason or "") if request else "")
        content = (
            _heading("キャンセルリクエストが届きました")
            + _table(rows, "#fffbeb")
            + _button(self.admin_url, "管理画面で確認する")
        )
        return EmailMessage(
            subject=f"【キャンセルリクエスト】{reservation.user_name} - {date_str}",
            html=self._wrap(content),
        )
