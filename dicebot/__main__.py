import asyncio
import io
import logging
import os
import shutil
import sys
import typing

import discord
import discord.ext.commands as commands

import dicebot
import dicebot.functions as functions
from dicebot.errors import DiceRollError
from dicebot.settings import DEFAULT_SETTINGS_FILE, Limits, load_settings

logger = logging.getLogger("dicebot")

settings: typing.Dict[str, typing.Any] = load_settings()

intents = discord.Intents.default()
intents.message_content = True

client = commands.Bot(
    command_prefix=lambda bot, message: settings["prefix"],
    intents=intents,
    activity=discord.Game(name="!help"),
    status=discord.Status.idle,
)


@client.event
async def on_ready():
    logger.info("We have logged in as %s", client.user)


def roll_message(expression: str) -> str:
    limits = Limits.from_settings(settings)
    result = dicebot.roll(expression, max_rolls=limits.max_rolls)
    return "**Input:** %s\n**Rolls:** %s\n**Result:** %s" % (
        result.expression(),
        result.trace(),
        result.total(),
    )


def distribution_of(expression: str) -> dicebot.Distribution:
    limits = Limits.from_settings(settings)
    return dicebot.distribution(
        expression,
        max_dice_size=limits.max_dice_size,
        max_outcomes=limits.max_outcomes,
    )


def distribution_message(expression: str) -> str:
    return "**Input:** %s\n```\n%s\n```" % (
        dicebot.parse(expression),
        functions.describe(distribution_of(expression)),
    )


def plot_image(expressions: typing.List[str]) -> bytes:
    return functions.plot(
        {str(dicebot.parse(expr)): distribution_of(expr) for expr in expressions}
    )


async def evaluate(ctx: commands.Context, fn: typing.Callable, *args):
    # the timeout only stops waiting; the worker thread runs until fn returns
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(fn, *args), timeout=settings["timeout"]
        )
    except asyncio.TimeoutError:
        logger.warning("timed out evaluating %s", args)
        await ctx.send("Your roll took too long to evaluate. Sorry!")
    except DiceRollError as e:
        await ctx.send("Error in input: %s" % e.args[0])
    except BaseException as e:
        try:
            await ctx.send("An internal error occured. Sorry!")
        except BaseException:
            pass
        raise e
    return None


@client.command(
    name="roll",
    brief="roll dice",
    description="""!roll <expr>

Parameters:
    expr - The expression to roll.

Result:
    Rolls a dice expression once. Use XdY notation and basic math
    (+, -, *, / and %). Dice can be modified by appending codes:
        mi<n> / ma<n> - raise dice to at least / lower to at most n.
        rr<sel> - reroll matching dice until they stop matching.
        ro<sel> - reroll matching dice once.
        ra<sel> - roll one extra die if any die matches.
        e<sel> - roll an extra die for every matching die, repeatedly.
        k<sel> / p<sel> - keep / drop the matching dice.
    A selector is a number (exact match), <n or >n, or hN / lN for the
    highest or lowest N dice. For example: 4d6kh3, 2d20kl1, 8d6ro1.
""",
)
async def roll_(ctx: commands.Context, *args: str):
    message = await evaluate(ctx, roll_message, " ".join(args))
    if message is not None:
        await ctx.send(message)


@client.command(
    name="dist",
    brief="dice probabilities",
    description="""!dist <expr>

Parameters:
    expr - The expression to analyse.

Result:
    Prints the exact probability of every total of the expression,
    with its minimum, maximum, mean and standard deviation.
    Rerolling and exploding modifiers cannot be analysed.
""",
)
async def dist(ctx: commands.Context, *args: str):
    message = await evaluate(ctx, distribution_message, " ".join(args))
    if message is not None:
        await ctx.send(message)


@client.command(
    brief="plot dice probabilities",
    description="""!plot <expr>[; <expr>...]

Parameters:
    expr - The expressions to compare, separated by semicolons.

Result:
    Produces a graph comparing the probability distributions
    of all the given expressions.

Examples:
    !plot 2d6
    !plot 1d20; 2d20kh1; 2d20kl1
""",
)
async def plot(ctx: commands.Context, *args: str):
    expressions = [expr for expr in " ".join(args).split(";") if expr.strip()]
    if not expressions:
        await ctx.send("error: expected at least one expression")
        return
    image = await evaluate(ctx, plot_image, expressions)
    if image is not None:
        await ctx.send(file=discord.File(io.BytesIO(image), filename="image.png"))


def main(argv: typing.List[str] = sys.argv) -> int:
    if not os.path.exists("settings.yaml"):
        shutil.copy(DEFAULT_SETTINGS_FILE, "settings.yaml")
        print(
            "settings.yaml not detected!"
            " A default one has been provided."
            " Please edit that file and re-run this program."
        )
        return 1

    global settings
    settings = load_settings("settings.yaml")
    logging.basicConfig(
        level=settings["log_level"],
        format="[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s",
    )

    client.run(settings["token"], log_handler=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
