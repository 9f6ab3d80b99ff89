from pyredux import create_action

increment = create_action("[Counter] Increment")
decrement = create_action("[Counter] Decrement")
reset = create_action("[Counter] Reset", lambda value: value)
increment_by = create_action("[Counter] Increment By", lambda amount: amount)
set_label = create_action("[Label] Set", lambda text: text)
