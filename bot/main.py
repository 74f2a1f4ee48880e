import logging
import os
from pathlib import Path
from dotenv import load_dotenv
from telegram.ext import Application, CommandHandler, ConversationHandler, CallbackQueryHandler
from bot.states import SELECTING_CATEGORY, VIEWING_IMAGES
from bot.handlers.base import cancel_command, get_base_handlers
from bot.handlers.browse import start_browse, category_selected, handle_pagination

# Load environment variables from .env file in project root
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)
# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
logger = logging.getLogger(__name__)

def main() -> None:
    token = os.getenv("BOT_TOKEN")
    if not token:
        raise ValueError("BOT_TOKEN environment variable not set")

    application = (
        Application.builder()
        .token(token)
        .read_timeout(30)
        .write_timeout(30)
        .connect_timeout(30)
        .pool_timeout(30)
        .build()
    )

    # Browse conversation goes first so /cancel ends it before the plain handler sees it
    browse_conv = ConversationHandler(
        entry_points=[CommandHandler("browse", start_browse)],
        states={
            SELECTING_CATEGORY: [
                CallbackQueryHandler(category_selected, pattern=r"^(category_|cancel_browse$)")
            ],
            VIEWING_IMAGES: [
                CallbackQueryHandler(handle_pagination)
            ],
        },
        fallbacks=[CommandHandler("cancel", cancel_command)],
        per_user=True,  # Track state per user
        per_chat=True,  # Track state per chat
        conversation_timeout=300
    )
    application.add_handler(browse_conv)

    for handler in get_base_handlers():
        application.add_handler(handler)

    # Start the bot
    logger.info("Bot is starting...")
    application.run_polling()

if __name__ == "__main__":
    main()
