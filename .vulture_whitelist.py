# Vulture whitelist for recipe-explorer
# This file contains patterns that vulture should ignore to reduce false positives

# CLI command functions - these are used by Click decorators
search_command
show_command
letters_command
ingredient_command
random_command
favorites_group
favorites_list
favorites_add
favorites_remove
cache_group
cache_clear
menu

# Pydantic model fields and methods - used by the framework
model_config
thumbnail

# Async context manager protocol
__aenter__
__aexit__
exc_type
exc_val
exc_tb
