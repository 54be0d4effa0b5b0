import discord
from discord.ext import commands
import logging
import asyncio
from typing import Optional
import os

from .data_manager import DataManager
from .config_manager import ConfigManager
from .models import Operation
from .quiz_engine import InvalidConfigurationError, format_answer
from .quiz_session import QuizSession

logger = logging.getLogger(__name__)


class QuizBot(commands.Bot):
    """Discord bot that runs a single-player arithmetic quiz"""

    def __init__(self, config=None):
        # Minimal intents for slash commands
        intents = discord.Intents.none()
        intents.guilds = True

        command_prefix = '!'
        if config and 'bot' in config:
            command_prefix = config['bot'].get('command_prefix', '!')

        super().__init__(
            command_prefix=command_prefix,  # Fallback prefix, mainly using slash commands
            intents=intents,
            help_command=None
        )

        self.app_config = config or {}

        self.config_manager: Optional[ConfigManager] = None
        self.data_manager: Optional[DataManager] = None
        self.session: Optional[QuizSession] = None

        # Discord user who owns the game in progress
        self.player_id: Optional[int] = None

    async def setup_hook(self):
        """Called when the bot is starting up"""
        try:
            logger.info("Setting up bot components...")
            self.initialize_components()
            await self.setup_commands()
            logger.info("Bot setup completed successfully")

        except Exception as e:
            logger.error(f"Error during bot setup: {e}")
            raise

    def initialize_components(self):
        """Create the configuration, the store and the process-wide session."""
        self.config_manager = ConfigManager()

        quiz_config = self.app_config.get('quiz', {})
        if quiz_config:
            errors = self.config_manager.apply_config(quiz_config)
            for error in errors:
                logger.warning(f"Ignoring configuration entry: {error}")

        self.data_manager = DataManager(self.config_manager.get_storage_file())
        if self.data_manager.has_load_errors():
            logger.warning(f"High score store loaded with errors: {self.data_manager.get_load_errors()}")

        self.session = QuizSession(self.data_manager, self.config_manager.get_quiz_settings())

    async def setup_commands(self):
        """Register all slash commands"""
        try:
            @self.tree.command(name="help", description="Display available commands and their descriptions")
            async def help_command(interaction: discord.Interaction):
                await self.handle_help(interaction)

            # Settings commands
            @self.tree.command(name="toggle_operation", description="Enable or disable an operation (+, -, ×, ÷)")
            async def toggle_operation_command(interaction: discord.Interaction, operation: str):
                await self.handle_toggle_operation(interaction, operation)

            @self.tree.command(name="set_digits", description="Set how many digits each number has")
            async def set_digits_command(interaction: discord.Interaction, digits: int):
                await self.handle_set_digits(interaction, digits)

            # Game commands
            @self.tree.command(name="start", description="Start a new game with the current settings")
            async def start_command(interaction: discord.Interaction):
                await self.handle_start(interaction)

            @self.tree.command(name="answer", description="Answer the current question")
            async def answer_command(interaction: discord.Interaction, value: str):
                await self.handle_answer(interaction, value)

            @self.tree.command(name="next", description="Move on to the next question")
            async def next_command(interaction: discord.Interaction):
                await self.handle_next(interaction)

            @self.tree.command(name="stop", description="End the current game")
            async def stop_command(interaction: discord.Interaction):
                await self.handle_stop(interaction)

            @self.tree.command(name="status", description="Show score, settings and the current question")
            async def status_command(interaction: discord.Interaction):
                await self.handle_status(interaction)

            logger.info("Slash commands registered successfully")

        except Exception as e:
            logger.error(f"Error setting up commands: {e}")
            raise

    async def on_ready(self):
        """Called when the bot has successfully connected to Discord"""
        try:
            logger.info(f"Bot is ready! Logged in as {self.user}")
            print(f"🤖 {self.user} is Ready and Online!")

            try:
                synced = await self.tree.sync()
                logger.info(f"Synced {len(synced)} slash commands")
                print(f"⚡ Synced {len(synced)} slash commands")
            except discord.HTTPException as e:
                logger.error(f"Failed to sync slash commands: {e}")
                print(f"❌ Failed to sync slash commands: {e}")

        except Exception as e:
            logger.error(f"Error in on_ready event: {e}")

    async def on_error(self, event, *args, **kwargs):
        """Handle general bot errors"""
        logger.error(f"An error occurred in event {event}", exc_info=True)

    def _is_other_player(self, interaction: discord.Interaction) -> bool:
        """True when a game is running and belongs to someone else."""
        return (
            self.session.is_playing
            and self.player_id is not None
            and interaction.user.id != self.player_id
        )

    def _question_embed(self, title: str, color: int = 0x6699ff) -> discord.Embed:
        embed = discord.Embed(
            title=title,
            description=f"**{self.session.question.prompt}**",
            color=color
        )
        embed.add_field(
            name="📊 Score",
            value=f"{self.session.score} (best {self.session.high_score})",
            inline=True
        )
        embed.set_footer(text="Reply with /answer <number>")
        return embed

    async def handle_discord_api_error(self, error: Exception, operation: str, interaction: discord.Interaction = None) -> None:
        """
        Handle Discord API errors and tell the user the command failed.

        Handlers are not retried because they have already changed the
        session. Rate limits and server errors wait briefly before the
        error response is sent.

        Args:
            error: The Discord API error
            operation: Description of the operation that failed
            interaction: Discord interaction object (optional)
        """
        if isinstance(error, discord.HTTPException):
            if error.status == 429:  # Rate limited
                retry_after = getattr(error, 'retry_after', 5)
                logger.warning(f"Rate limited during {operation}, waiting {retry_after}s")
                await asyncio.sleep(retry_after)
                message = "Discord is rate limiting the bot. Use /status to see the game state."
            elif error.status in [500, 502, 503, 504]:
                logger.warning(f"Discord server error during {operation}: {error.status}")
                await asyncio.sleep(2)
                message = "Discord had a server error. Use /status to see the game state."
            else:
                logger.error(f"Discord API error during {operation}: {error}")
                message = "Discord API error occurred. Please try again in a moment."

            if interaction:
                await self.send_error_response(interaction, message, "❌ Discord Error")
            return

        logger.error(f"Unexpected error during {operation}: {error}")
        if interaction:
            await self.send_error_response(
                interaction,
                "An unexpected error occurred. Please try again.",
                "❌ Unexpected Error"
            )

    async def handle_help(self, interaction: discord.Interaction):
        """Handle /help command"""
        try:
            help_embed = discord.Embed(
                title="🧮 Math Quiz Commands",
                description="Solve as many arithmetic questions in a row as you can",
                color=0x00ff00
            )

            help_embed.add_field(
                name="📋 Settings",
                value=(
                    "`/toggle_operation <op>` - Enable or disable +, -, × or ÷\n"
                    "`/set_digits <n>` - Set how many digits each number has "
                    f"({ConfigManager.MIN_DIGIT_LEVEL}-{ConfigManager.MAX_DIGIT_LEVEL})"
                ),
                inline=False
            )

            help_embed.add_field(
                name="🎮 Game",
                value=(
                    "`/start` - Start a new game\n"
                    "`/answer <number>` - Answer the current question\n"
                    "`/next` - Show the next question\n"
                    "`/stop` - End the game\n"
                    "`/status` - Show score and settings"
                ),
                inline=False
            )

            operations = " ".join(op.symbol for op in self.session.selected_operations) or "none"
            help_embed.add_field(
                name="⚙️ Current Settings",
                value=f"```\nDigits: {self.session.digit_level}\nOperations: {operations}\n```",
                inline=False
            )

            help_embed.set_footer(text=f"High score: {self.session.high_score}")

            await interaction.response.send_message(embed=help_embed)

        except Exception as e:
            logger.error(f"Error in help command: {e}")
            await self.send_error_response(interaction, "Failed to display help", "❌ Help Error")

    async def handle_toggle_operation(self, interaction: discord.Interaction, operation: str):
        """Handle /toggle_operation command"""
        try:
            try:
                op = Operation.parse(operation)
            except ValueError:
                await self.send_warning_response(
                    interaction,
                    f"Unknown operation `{operation}`. Use one of: + - × ÷",
                    "⚠️ Unknown Operation"
                )
                return

            if self._is_other_player(interaction):
                await self.send_warning_response(interaction, "Another player's game is in progress.")
                return

            self.session.toggle_operation(op)
            enabled = op in self.session.selected_operations
            operations = " ".join(o.symbol for o in self.session.selected_operations) or "none"

            embed = discord.Embed(
                title=f"{'✅' if enabled else '🚫'} {op.name.title()} {'enabled' if enabled else 'disabled'}",
                description=f"Enabled operations: **{operations}**",
                color=0x00ff00 if self.session.selected_operations else 0xffaa00
            )
            if not self.session.selected_operations:
                embed.add_field(
                    name="⚠️ No Operations",
                    value="Enable at least one operation before starting a game.",
                    inline=False
                )
            elif self.session.is_playing and self.session.operation not in self.session.selected_operations:
                embed.add_field(
                    name="ℹ️ Current Question",
                    value="The question on screen stays until you use `/next`.",
                    inline=False
                )

            await interaction.response.send_message(embed=embed)

        except discord.HTTPException as e:
            await self.handle_discord_api_error(e, "toggle_operation", interaction)
        except Exception as e:
            logger.error(f"Error in toggle_operation command: {e}")
            await self.send_error_response(interaction, "Failed to toggle operation", "❌ Configuration Error")

    async def handle_set_digits(self, interaction: discord.Interaction, digits: int):
        """Handle /set_digits command"""
        try:
            if self._is_other_player(interaction):
                await self.send_warning_response(interaction, "Another player's game is in progress.")
                return

            result = self.config_manager.validate_digit_level(digits)
            if not result['success']:
                await interaction.response.send_message(result['user_message'], ephemeral=True)
                return

            self.session.set_digit_level(digits)

            embed = discord.Embed(
                title="✅ Difficulty Updated",
                description=result['user_message'],
                color=0x00ff00
            )
            if self.session.is_playing:
                embed.add_field(
                    name="ℹ️ Current Question",
                    value="New numbers apply from the next question.",
                    inline=False
                )
            await interaction.response.send_message(embed=embed)

        except discord.HTTPException as e:
            await self.handle_discord_api_error(e, "set_digits", interaction)
        except Exception as e:
            logger.error(f"Error in set_digits command: {e}")
            await self.send_error_response(interaction, "Failed to set digit level", "❌ Configuration Error")

    async def handle_start(self, interaction: discord.Interaction):
        """Handle /start command"""
        try:
            if self._is_other_player(interaction):
                await self.send_warning_response(
                    interaction,
                    "Another player's game is in progress. Wait for it to end.",
                    "⚠️ Game In Progress"
                )
                return

            try:
                self.session.start_game()
            except InvalidConfigurationError:
                await self.send_warning_response(
                    interaction,
                    "Enable at least one operation with `/toggle_operation` first.",
                    "⚠️ No Operations Selected"
                )
                return

            self.player_id = interaction.user.id
            logger.info(f"Game started by user {self.player_id}")

            await interaction.response.send_message(embed=self._question_embed("🎯 Game Started!", 0x00ff00))

        except discord.HTTPException as e:
            await self.handle_discord_api_error(e, "start", interaction)
        except Exception as e:
            logger.error(f"Error in start command: {e}")
            await self.send_error_response(interaction, "Failed to start game", "❌ Game Start Error")

    async def handle_answer(self, interaction: discord.Interaction, value: str):
        """Handle /answer command"""
        try:
            if not self.session.is_playing:
                await self.send_info_response(interaction, "No game is running. Use `/start` to begin.", "ℹ️ No Active Game")
                return

            if self._is_other_player(interaction):
                await self.send_warning_response(interaction, "This game belongs to another player.")
                return

            if self.session.show_result:
                await self.send_info_response(interaction, "This question is already answered. Use `/next`.")
                return

            previous_high = self.session.high_score
            self.session.check_answer(value)

            if not self.session.show_result:
                await self.send_warning_response(interaction, f"`{value}` is not a number.", "⚠️ Invalid Answer")
                return

            if self.session.is_correct:
                embed = discord.Embed(
                    title="✅ Correct!",
                    description=f"{self.session.num1} {self.session.operation.symbol} {self.session.num2} = **{self.session.user_answer}**",
                    color=0x00ff00
                )
            else:
                embed = discord.Embed(
                    title="❌ Wrong",
                    description=(
                        f"You answered **{self.session.user_answer}**, "
                        f"the answer was **{format_answer(self.session.correct_answer)}**"
                    ),
                    color=0xff0000
                )

            embed.add_field(
                name="📊 Score",
                value=(
                    f"Score: {self.session.score} (best {self.session.high_score})\n"
                    f"Correct: {self.session.correct_answers}/{self.session.total_answered}"
                ),
                inline=False
            )
            if self.session.high_score > previous_high:
                embed.add_field(name="🏆 High Score", value="New personal best!", inline=False)
            embed.set_footer(text="Use /next for another question")

            await interaction.response.send_message(embed=embed)

        except discord.HTTPException as e:
            await self.handle_discord_api_error(e, "answer", interaction)
        except Exception as e:
            logger.error(f"Error in answer command: {e}")
            await self.send_error_response(interaction, "Failed to check answer", "❌ Answer Error")

    async def handle_next(self, interaction: discord.Interaction):
        """Handle /next command"""
        try:
            if not self.session.is_playing:
                await self.send_info_response(interaction, "No game is running. Use `/start` to begin.", "ℹ️ No Active Game")
                return

            if self._is_other_player(interaction):
                await self.send_warning_response(interaction, "This game belongs to another player.")
                return

            try:
                self.session.next_question()
            except InvalidConfigurationError:
                await self.send_warning_response(
                    interaction,
                    "Enable at least one operation with `/toggle_operation` first.",
                    "⚠️ No Operations Selected"
                )
                return

            await interaction.response.send_message(embed=self._question_embed("❓ Next Question"))

        except discord.HTTPException as e:
            await self.handle_discord_api_error(e, "next", interaction)
        except Exception as e:
            logger.error(f"Error in next command: {e}")
            await self.send_error_response(interaction, "Failed to generate a question", "❌ Question Error")

    async def handle_stop(self, interaction: discord.Interaction):
        """Handle /stop command"""
        try:
            if not self.session.is_playing:
                embed = discord.Embed(
                    title="ℹ️ No Active Game",
                    description="There is no game to stop.",
                    color=0x6699ff
                )
                embed.add_field(name="Start a Game", value="Use `/start` to begin", inline=False)
                await interaction.response.send_message(embed=embed, ephemeral=True)
                return

            if self._is_other_player(interaction):
                await self.send_warning_response(interaction, "This game belongs to another player.")
                return

            self.session.end_game()
            self.player_id = None

            embed = discord.Embed(
                title="🛑 Game Over",
                description=f"Final score: **{self.session.score}**",
                color=0xff6600
            )
            embed.add_field(
                name="📊 Final Stats",
                value=(
                    f"Correct: {self.session.correct_answers}/{self.session.total_answered} "
                    f"({self.session.accuracy}%)\n"
                    f"High score: {self.session.high_score}"
                ),
                inline=False
            )
            embed.set_footer(text="Use /start to play again")

            await interaction.response.send_message(embed=embed)

        except Exception as e:
            logger.error(f"Error in stop command: {e}")
            await self.send_error_response(interaction, "Failed to stop game", "❌ Game Control Error")

    async def handle_status(self, interaction: discord.Interaction):
        """Handle /status command"""
        try:
            progress = self.session.get_session_progress()
            operations = " ".join(progress['selected_operations']) or "none"

            if progress['is_playing']:
                embed = discord.Embed(
                    title="▶️ Game In Progress",
                    description=f"**{progress['prompt']}**",
                    color=0x00ff00
                )
            else:
                embed = discord.Embed(
                    title="ℹ️ No Active Game",
                    description="Use `/start` to begin a new game",
                    color=0x6699ff
                )

            embed.add_field(
                name="📊 Score",
                value=(
                    f"Score: {progress['score']}\n"
                    f"High score: {progress['high_score']}\n"
                    f"Correct: {progress['correct_answers']}/{progress['total_answered']} ({progress['accuracy']}%)"
                ),
                inline=True
            )
            embed.add_field(
                name="⚙️ Settings",
                value=f"Digits: {progress['digit_level']}\nOperations: {operations}",
                inline=True
            )

            embed.set_footer(text="Use /help to see all available commands")
            await interaction.response.send_message(embed=embed)

        except Exception as e:
            logger.error(f"Error in status command: {e}")
            await self.send_error_response(interaction, "Failed to get game status", "❌ Status Error")

    async def send_error_response(self, interaction: discord.Interaction, message: str, title: str = "❌ Error"):
        """Send formatted error response to user"""
        try:
            embed = discord.Embed(
                title=title,
                description=message,
                color=0xff0000
            )
            embed.set_footer(text="If this error persists, try using /help for available commands")

            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.error("Failed to send error response to user")

    async def send_info_response(self, interaction: discord.Interaction, message: str, title: str = "ℹ️ Information"):
        """Send formatted info response to user"""
        try:
            embed = discord.Embed(
                title=title,
                description=message,
                color=0x6699ff
            )

            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.error("Failed to send info response to user")

    async def send_warning_response(self, interaction: discord.Interaction, message: str, title: str = "⚠️ Warning"):
        """Send formatted warning response to user"""
        try:
            embed = discord.Embed(
                title=title,
                description=message,
                color=0xffaa00
            )

            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.error("Failed to send warning response to user")


async def run_bot(token=None, config=None):
    """Run the bot with proper error handling"""
    if not token:
        token = os.getenv('DISCORD_BOT_TOKEN')

    if not token:
        logger.error("No Discord bot token provided")
        return

    bot = QuizBot(config)

    try:
        logger.info("Starting Math Quiz Bot...")
        await bot.start(token)
    except discord.LoginFailure:
        logger.error("Invalid bot token provided")
    except discord.HTTPException as e:
        logger.error(f"HTTP error occurred: {e}")
    finally:
        if not bot.is_closed():
            await bot.close()
