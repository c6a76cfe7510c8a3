"""Policies that wrap asynchronous actions: retry, timeout, rate limit, circuit breaker and protection."""