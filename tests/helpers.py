"""Small assertions shared across test modules."""


def scene_text(game) -> list[str]:
    """Plain text of every content block in the current scene."""
    return [item.plain_text for item in game.scene.content]


def option_labels(game) -> list[str]:
    return [option.label for option in game.scene.options]


def skip_opening(game) -> None:
    """Click through the opening sequence until no options remain."""
    while game.scene.options:
        game.choose(0)
