from telegram import Update, InputMediaPhoto
from telegram.ext import ContextTypes, CommandHandler, ConversationHandler
from bot import api
from bot.helpers import format_attributes, image_caption, photo_url

MAX_PAIRS = 5

async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Send welcome message"""
    user = update.effective_user
    await update.message.reply_text(
        f"Hi {user.first_name}! Welcome to the portfolio.\n\n"
        "Use /browse to view images\n"
        "Use /categories to see available categories\n"
        "Use /filters to see what you can filter by\n"
        "Use /pairs to see before/after edits"
    )

async def list_categories(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """List available categories"""
    categories = await api.get_categories()
    if not categories:
        await update.message.reply_text("❌ Failed to fetch categories.")
        return

    message = "📁 Available categories:\n\n"
    for cat in categories:
        message += f"- {cat['title']} ({cat['image_count']} images)\n"

    await update.message.reply_text(message)

async def list_filters(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Show facet values with their image counts"""
    attributes = await api.get_attributes()
    text = format_attributes(attributes) if attributes else ""
    if not text:
        await update.message.reply_text("No filters available right now.")
        return
    await update.message.reply_text(f"🔎 Portfolio filters:\n\n{text}")

async def show_pairs(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Send before/after pairs as two-photo albums"""
    pairs = await api.get_before_after()
    if not pairs:
        await update.message.reply_text("No before/after comparisons found.")
        return

    for pair in pairs[:MAX_PAIRS]:
        before, after = pair["before"], pair["after"]
        await context.bot.send_media_group(
            chat_id=update.effective_chat.id,
            media=[
                InputMediaPhoto(media=photo_url(before), caption=image_caption(before)),
                InputMediaPhoto(media=photo_url(after)),
            ]
        )

async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Cancel any ongoing operation"""
    for key in ['category_id', 'category_name', 'cursors', 'next_cursor', 'current_image']:
        context.user_data.pop(key, None)

    await update.message.reply_text("Operation cancelled.")
    return ConversationHandler.END

def get_base_handlers():
    return [
        CommandHandler("start", start),
        CommandHandler("categories", list_categories),
        CommandHandler("filters", list_filters),
        CommandHandler("pairs", show_pairs),
        CommandHandler("cancel", cancel_command),
    ]
