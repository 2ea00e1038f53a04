import numpy as np

from slipgrid.rl.report import format_q_table


def test_q_table_dump():
    q = np.zeros((25, 4))
    q[2, 3] = -100.0
    q[23, 3] = 100.0
    q[0, 1] = 12.3456
    lines = format_q_table(q).splitlines()
    assert lines[1] == "--- Q-Table ---"
    assert lines[2] == "       State        Up      Down      Left    Right"
    assert len(lines) == 3 + 25
    assert lines[3] == "           0      0.00     12.35      0.00      0.00"
    assert lines[5].endswith("   -100.00")
    assert lines[26].endswith("    100.00")
