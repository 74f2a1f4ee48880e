from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup, InputMediaPhoto
from telegram.ext import ContextTypes, ConversationHandler
from bot import api
from bot.helpers import image_caption, photo_url
from bot.states import SELECTING_CATEGORY, VIEWING_IMAGES

PER_PAGE = 5

async def _reply(update: Update, text: str, reply_markup=None):
    # Handle both message and callback query cases
    if update.message:
        await update.message.reply_text(text, reply_markup=reply_markup)
    elif update.callback_query and update.callback_query.message:
        await update.callback_query.message.reply_text(text, reply_markup=reply_markup)

def _navigation_keyboard(has_previous: bool, has_next: bool, has_images: bool = True) -> InlineKeyboardMarkup:
    keyboard = []
    page_buttons = []
    if has_previous:
        page_buttons.append(InlineKeyboardButton("⬅️ Previous", callback_data="prev_page"))
    if has_next:
        page_buttons.append(InlineKeyboardButton("Next ➡️", callback_data="next_page"))
    if page_buttons:
        keyboard.append(page_buttons)
    if has_images:
        keyboard.append([InlineKeyboardButton("🔗 Related", callback_data="related")])
    keyboard.append([
        InlineKeyboardButton("🏠 Back to Categories", callback_data="back_categories"),
        InlineKeyboardButton("❌ Cancel", callback_data="cancel_browse")
    ])
    return InlineKeyboardMarkup(keyboard)

async def _send_photos(context: ContextTypes.DEFAULT_TYPE, chat_id: int, images: list, caption: str):
    # Media groups need at least two items
    if len(images) == 1:
        await context.bot.send_photo(chat_id=chat_id, photo=photo_url(images[0]), caption=caption)
        return
    media_group = [
        InputMediaPhoto(media=photo_url(img), caption=caption if i == 0 else None)
        for i, img in enumerate(images)
    ]
    await context.bot.send_media_group(chat_id=chat_id, media=media_group)

async def start_browse(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Start the browsing process"""
    # Clear any previous browsing data
    context.user_data.pop('category_id', None)
    context.user_data.pop('category_name', None)
    context.user_data.pop('cursors', None)
    context.user_data.pop('next_cursor', None)
    context.user_data.pop('current_image', None)

    categories = await api.get_categories()
    if not categories:
        await _reply(update, "❌ No categories available.")
        return ConversationHandler.END

    keyboard = [
        [InlineKeyboardButton(f"{cat['title']} ({cat['image_count']})", callback_data=f"category_{cat['id']}")]
        for cat in categories
    ]
    keyboard.append([InlineKeyboardButton("❌ Cancel", callback_data="cancel_browse")])

    await _reply(update, "📁 Select a category:", InlineKeyboardMarkup(keyboard))
    return SELECTING_CATEGORY

async def category_selected(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle category selection and show the first page"""
    query = update.callback_query
    await query.answer()

    if query.data == "cancel_browse":
        await query.edit_message_text("Browsing cancelled.")
        return ConversationHandler.END

    category_id = query.data.split('_', 1)[1]
    context.user_data['category_id'] = category_id
    context.user_data['category_name'] = next(
        (button.text for row in query.message.reply_markup.inline_keyboard
         for button in row if button.callback_data == query.data),
        category_id
    )
    # Cursor of every page shown so far; the first page has none
    context.user_data['cursors'] = [None]

    await query.edit_message_text(f"📂 {context.user_data['category_name']}")
    return await show_images(update, context)

async def show_images(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Show the page that starts after the current cursor"""
    query = update.callback_query
    chat_id = query.message.chat_id if query and query.message else update.effective_chat.id

    if 'category_id' not in context.user_data or not context.user_data.get('cursors'):
        await context.bot.send_message(chat_id, "❌ Session data lost. Please start over with /browse.")
        return ConversationHandler.END

    cursors = context.user_data['cursors']
    # One extra image tells whether another page exists
    images = await api.search_images(
        category_id=context.user_data['category_id'],
        limit=PER_PAGE + 1,
        start_after=cursors[-1]
    )
    if images is None:
        await context.bot.send_message(
            chat_id,
            "❌ Failed to load images.",
            reply_markup=_navigation_keyboard(len(cursors) > 1, False, has_images=False)
        )
        return VIEWING_IMAGES

    has_next = len(images) > PER_PAGE
    images = images[:PER_PAGE]
    if not images:
        await context.bot.send_message(
            chat_id,
            "No images found for this selection.",
            reply_markup=_navigation_keyboard(len(cursors) > 1, False, has_images=False)
        )
        return VIEWING_IMAGES

    context.user_data['next_cursor'] = images[-1]['id']
    context.user_data['current_image'] = images[0]['id']
    await _send_photos(context, chat_id, images, image_caption(images[0], context.user_data['category_name']))

    await context.bot.send_message(
        chat_id=chat_id,
        text=f"📷 Page {len(cursors)}",
        reply_markup=_navigation_keyboard(len(cursors) > 1, has_next)
    )
    return VIEWING_IMAGES

async def show_related(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Show images sharing a tag and camera with the first image of the page"""
    query = update.callback_query
    chat_id = query.message.chat_id
    related = await api.get_related_images(
        context.user_data['category_id'],
        context.user_data['current_image'],
        limit=PER_PAGE
    )
    if not related:
        await context.bot.send_message(chat_id, "No related images found.")
        return VIEWING_IMAGES

    await _send_photos(context, chat_id, related, f"🔗 Related images ({len(related)})")
    return VIEWING_IMAGES

async def handle_pagination(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle pagination button presses"""
    query = update.callback_query
    await query.answer()
    cursors = context.user_data.get('cursors', [])

    if query.data == "next_page" and context.user_data.get('next_cursor'):
        cursors.append(context.user_data.pop('next_cursor'))
        return await show_images(update, context)
    elif query.data == "prev_page" and len(cursors) > 1:
        cursors.pop()
        return await show_images(update, context)
    elif query.data == "related" and context.user_data.get('current_image'):
        return await show_related(update, context)
    elif query.data == "back_categories":
        await query.message.reply_text("Returning to categories...")
        return await start_browse(update, context)
    elif query.data == "cancel_browse":
        await query.edit_message_text("Browsing cancelled.")
        return ConversationHandler.END

    return VIEWING_IMAGES
