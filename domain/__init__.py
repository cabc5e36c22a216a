"""Describes the MealMuse domain. Centres around the flows in `services`.

Why is this thin?

- Meal plans, festival suggestions and recipes all come from a large language
  model served behind an api.
- Accounts come from Firebase, also behind an api.
- The only invariants are on the shape of what goes in and what comes back,
  so those are pydantic models and everything else is passed through.

Both apis can be faked, which is what the tests do.
"""
