"""Loading configuration dataclasses from YAML and the environment, and validating them."""