"""Telegram chat front-end: receipt photos, category prompts and manual expenses."""

from __future__ import annotations

import asyncio
import os
from io import BytesIO

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from kassa.application.expenses import ExpenseEntryController, ExpenseStep
from kassa.application.expenses.entry import BACK_WORD, SKIP_WORD
from kassa.application.receipts import (
    DialogueStep,
    ReceiptDialogueController,
    ReceiptScanRequest,
    record_finalized_receipt,
    run_receipt_scan,
)
from kassa.receipt.categories import CANCEL_WORD, CategoryVocabulary
from kassa.receipt.formatter import (
    ANALYZING_MESSAGE,
    CANCELLED_MESSAGE,
    INVALID_CATEGORY_MESSAGE,
    NO_ITEMS_MESSAGE,
    NO_RAW_TEXT_MESSAGE,
    OCR_FAILED_MESSAGE,
    PHOTO_ERROR_MESSAGE,
    SAVE_FAILED_MESSAGE,
    SHOW_RAW_BUTTON,
    format_amount,
    format_item_prompt,
    format_learned_ack,
    format_receipt_report,
    format_unresolved_blocks,
)
from kassa.runtime.category_rules import load_category_vocabulary
from kassa.runtime.logging import configure_logging, get_logger
from kassa.runtime.ocr_oracle import OcrOracle, create_ocr_oracle
from kassa.runtime.storage import SqlCategoryLearningStore, SqlTransactionRecorder, create_session_factory

logger = get_logger(__name__)

SHOW_RAW_CALLBACK = "show_raw_ocr"
EXPENSE_BUTTON = "Расход"
HELP_BUTTON = "Помощь"
# Telegram rejects messages above 4096 characters; longer raw text goes out as a file.
MAX_INLINE_TEXT = 4000

HELP_MESSAGE = (
    "Отправьте фото чека, и я разберу товары по категориям.\n\n"
    "Команды:\n"
    "/expense - Записать расход вручную\n"
    "/show - Показать сырой текст последнего чека\n"
    "/help - Эта справка"
)

MAIN_KEYBOARD = ReplyKeyboardMarkup([[EXPENSE_BUTTON], [HELP_BUTTON]], resize_keyboard=True)
BACK_KEYBOARD = ReplyKeyboardMarkup([[BACK_WORD]], resize_keyboard=True)
SKIP_COMMENT_KEYBOARD = ReplyKeyboardMarkup([[SKIP_WORD], [BACK_WORD]], resize_keyboard=True)
SHOW_RAW_KEYBOARD = InlineKeyboardMarkup([[InlineKeyboardButton(SHOW_RAW_BUTTON, callback_data=SHOW_RAW_CALLBACK)]])


def category_keyboard(vocabulary: CategoryVocabulary, with_back: bool = False) -> ReplyKeyboardMarkup:
    rows = [list(group) for group in vocabulary.groups]
    rows.append([BACK_WORD, CANCEL_WORD] if with_back else [CANCEL_WORD])
    return ReplyKeyboardMarkup(rows, resize_keyboard=True)


class KassaBot:
    """Chat handlers bound to one set of controllers and stores."""

    def __init__(
        self,
        oracle: OcrOracle,
        store: SqlCategoryLearningStore,
        recorder: SqlTransactionRecorder,
        vocabulary: CategoryVocabulary,
    ) -> None:
        self.oracle = oracle
        self.recorder = recorder
        self.vocabulary = vocabulary
        self.receipts = ReceiptDialogueController(store, vocabulary)
        self.expenses = ExpenseEntryController(store, vocabulary)
        # Last OCR text per chat, for /show and the debug button.
        self.last_raw_text: dict[int, str] = {}

    async def start_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = update.effective_chat.id
        self.receipts.cancel(chat_id)
        self.expenses.cancel(chat_id)
        await update.message.reply_text("Привет! Бот в строю.", reply_markup=MAIN_KEYBOARD)

    async def help_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_text(HELP_MESSAGE, reply_markup=MAIN_KEYBOARD)

    async def _send_raw_text(self, chat_id: int, context: ContextTypes.DEFAULT_TYPE) -> None:
        raw = self.last_raw_text.get(chat_id)
        if not raw:
            await context.bot.send_message(chat_id=chat_id, text=NO_RAW_TEXT_MESSAGE)
            return
        if len(raw) > MAX_INLINE_TEXT:
            await context.bot.send_document(
                chat_id=chat_id,
                document=BytesIO(raw.encode("utf-8")),
                filename="receipt.txt",
            )
            return
        await context.bot.send_message(chat_id=chat_id, text=raw)

    async def show_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._send_raw_text(update.effective_chat.id, context)

    async def expense_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = update.effective_chat.id
        self.receipts.cancel(chat_id)
        self.expenses.start(chat_id)
        await update.message.reply_text("Сумма расхода:", reply_markup=BACK_KEYBOARD)

    async def handle_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        await query.answer()
        if query.data == SHOW_RAW_CALLBACK:
            await self._send_raw_text(query.message.chat_id, context)

    async def handle_photo(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = update.effective_chat.id
        # A new photo abandons whatever the chat was in the middle of
        self.receipts.cancel(chat_id)
        self.expenses.cancel(chat_id)
        await update.message.reply_text(ANALYZING_MESSAGE)
        try:
            photo = update.message.photo[-1]
            file = await context.bot.get_file(photo.file_id)
            image_bytes = bytes(await file.download_as_bytearray())
            result = await asyncio.to_thread(run_receipt_scan, ReceiptScanRequest(image_bytes=image_bytes), self.oracle)
        except Exception:
            logger.exception("Error processing photo in chat %s", chat_id)
            await update.message.reply_text(PHOTO_ERROR_MESSAGE)
            return

        if result.raw_text:
            self.last_raw_text[chat_id] = result.raw_text

        if result.status in ("ocr_unavailable", "no_text"):
            await update.message.reply_text(OCR_FAILED_MESSAGE)
            return
        if result.status != "parsed" or result.receipt is None:
            await update.message.reply_text(NO_ITEMS_MESSAGE, reply_markup=SHOW_RAW_KEYBOARD)
            return

        step = await asyncio.to_thread(self.receipts.start, chat_id, result.receipt)
        await self._reply_receipt_step(update, step)

    async def handle_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = update.effective_chat.id
        text = update.message.text or ""

        if self.receipts.has_session(chat_id):
            step = await asyncio.to_thread(self.receipts.handle_reply, chat_id, text)
            await self._reply_receipt_step(update, step)
            return
        if self.expenses.has_session(chat_id):
            expense_step = await asyncio.to_thread(self.expenses.handle_reply, chat_id, text)
            await self._reply_expense_step(update, chat_id, expense_step)
            return

        stripped = text.strip()
        if stripped == EXPENSE_BUTTON:
            await self.expense_command(update, context)
        elif stripped == CANCEL_WORD:
            await update.message.reply_text(CANCELLED_MESSAGE, reply_markup=MAIN_KEYBOARD)
        else:
            await self.help_command(update, context)

    async def _reply_receipt_step(self, update: Update, step: DialogueStep) -> None:
        if step.learned:
            await update.message.reply_text(format_learned_ack(*step.learned), parse_mode=ParseMode.MARKDOWN)

        if step.state == "CANCELLED":
            await update.message.reply_text(CANCELLED_MESSAGE, reply_markup=MAIN_KEYBOARD)
        elif step.state == "AWAITING_ITEM_CATEGORY" and step.receipt and step.item:
            if not step.accepted:
                await update.message.reply_text(INVALID_CATEGORY_MESSAGE)
            elif step.item_index == 0 and step.receipt.unresolved_blocks:
                await update.message.reply_text(
                    format_unresolved_blocks(step.receipt.unresolved_blocks), parse_mode=ParseMode.MARKDOWN
                )
            await update.message.reply_text(
                format_item_prompt(step.receipt, step.item),
                parse_mode=ParseMode.MARKDOWN,
                reply_markup=category_keyboard(self.vocabulary),
            )
        elif step.state == "FINALIZED" and step.finalized:
            user_id = update.effective_user.id if update.effective_user else None
            try:
                await asyncio.to_thread(record_finalized_receipt, step.finalized, self.recorder, user_id)
            except Exception:
                logger.exception("Failed to record receipt from %s", step.finalized.receipt.shop_name)
                await update.message.reply_text(SAVE_FAILED_MESSAGE, reply_markup=MAIN_KEYBOARD)
                return
            await update.message.reply_text(
                format_receipt_report(step.finalized),
                parse_mode=ParseMode.MARKDOWN,
                reply_markup=SHOW_RAW_KEYBOARD,
            )
            await update.message.reply_text("Готово.", reply_markup=MAIN_KEYBOARD)

    async def _reply_expense_step(self, update: Update, chat_id: int, step: ExpenseStep) -> None:
        if step.state == "CANCELLED":
            await update.message.reply_text(CANCELLED_MESSAGE, reply_markup=MAIN_KEYBOARD)
        elif step.state == "AWAITING_AMOUNT":
            message = "Введите сумму числом:" if not step.accepted else "Сумма расхода:"
            await update.message.reply_text(message, reply_markup=BACK_KEYBOARD)
        elif step.state == "AWAITING_COMMENT":
            await update.message.reply_text("Комментарий:", reply_markup=SKIP_COMMENT_KEYBOARD)
        elif step.state == "AWAITING_CATEGORY":
            if not step.accepted:
                await update.message.reply_text(INVALID_CATEGORY_MESSAGE)
            await update.message.reply_text("Категория?", reply_markup=category_keyboard(self.vocabulary, True))
        elif step.state == "RECORDED" and step.intent:
            user_id = update.effective_user.id if update.effective_user else None
            try:
                await asyncio.to_thread(self.recorder.record_transaction, step.intent, user_id)
            except Exception:
                logger.exception("Failed to record expense for chat %s", chat_id)
                await update.message.reply_text(SAVE_FAILED_MESSAGE, reply_markup=MAIN_KEYBOARD)
                return
            prefix = f'🧠 Узнал "{step.intent.comment}"! ' if step.auto_categorized else ""
            await update.message.reply_text(
                f"{prefix}Записал расход {format_amount(step.intent.amount)} в \"{step.intent.category}\".",
                reply_markup=MAIN_KEYBOARD,
            )


def build_application(bot: KassaBot, token: str) -> Application:
    application = ApplicationBuilder().token(token).build()

    application.add_handler(CommandHandler("start", bot.start_command))
    application.add_handler(CommandHandler("help", bot.help_command))
    application.add_handler(CommandHandler("show", bot.show_command))
    application.add_handler(CommandHandler("expense", bot.expense_command))
    application.add_handler(CallbackQueryHandler(bot.handle_callback))
    application.add_handler(MessageHandler(filters.PHOTO, bot.handle_photo))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, bot.handle_text))
    return application


def run_bot(token: str | None = None, database_url: str | None = None, ocr_backend: str | None = None) -> None:
    """Wire stores, OCR and vocabulary, then poll Telegram until interrupted."""
    configure_logging()
    token = token or os.environ.get("TELEGRAM_BOT_TOKEN")
    if not token:
        raise SystemExit("Please set TELEGRAM_BOT_TOKEN in the environment to run the bot.")

    session_factory = create_session_factory(database_url)
    bot = KassaBot(
        oracle=create_ocr_oracle(ocr_backend),
        store=SqlCategoryLearningStore(session_factory),
        recorder=SqlTransactionRecorder(session_factory),
        vocabulary=load_category_vocabulary(),
    )
    application = build_application(bot, token)
    logger.info("Starting Telegram bot...")
    application.run_polling(drop_pending_updates=True)
