"""A dependency-injection container and its providers."""