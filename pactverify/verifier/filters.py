"""Decide which consumers and interactions a run verifies."""
import re

from .config import PACT_FILTER_CONSUMERS, PACT_FILTER_DESCRIPTION, PACT_FILTER_PROVIDERSTATE


def filter_consumers(consumer, config):
    if not config.has_property(PACT_FILTER_CONSUMERS):
        return True
    names = [name.strip() for name in config.get_property(PACT_FILTER_CONSUMERS).split(',')]
    return consumer.name in names


def filter_interactions(interaction, config):
    by_description = config.has_property(PACT_FILTER_DESCRIPTION)
    by_state = config.has_property(PACT_FILTER_PROVIDERSTATE)
    if by_description and by_state:
        return match_description(interaction, config) and match_state(interaction, config)
    if by_description:
        return match_description(interaction, config)
    if by_state:
        return match_state(interaction, config)
    return True


def match_state(interaction, config):
    pattern = config.get_property(PACT_FILTER_PROVIDERSTATE) or ''
    if interaction.provider_state:
        return re.fullmatch(pattern, interaction.provider_state) is not None
    # an interaction without a state only matches an empty filter
    return pattern == ''


def match_description(interaction, config):
    pattern = config.get_property(PACT_FILTER_DESCRIPTION) or ''
    return re.fullmatch(pattern, interaction.description) is not None
