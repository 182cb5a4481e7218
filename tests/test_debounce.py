from viewer_ui.debounce import Debouncer


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_rapid_edits_settle_once_to_last_value():
    clock = FakeClock()
    debouncer = Debouncer(delay=1.0, clock=clock)
    settled = []

    for value in ["a", "ab", "abc"]:
        debouncer.push(value)
        clock.advance(0.4)
        result = debouncer.poll()
        if result is not None:
            settled.append(result)

    clock.advance(1.0)
    for _ in range(3):
        result = debouncer.poll()
        if result is not None:
            settled.append(result)

    assert settled == ["abc"]
    assert debouncer.settled == "abc"


def test_nothing_settles_before_the_delay():
    clock = FakeClock()
    debouncer = Debouncer(delay=1.0, clock=clock)
    debouncer.push("https://github.com/octocat/Hello-World")
    clock.advance(0.5)
    assert debouncer.poll() is None
    assert debouncer.remaining() is not None and debouncer.remaining() > 0
    clock.advance(0.5)
    assert debouncer.poll() == "https://github.com/octocat/Hello-World"
    assert debouncer.remaining() is None


def test_each_change_restarts_the_window():
    clock = FakeClock()
    debouncer = Debouncer(delay=1.0, clock=clock)
    debouncer.push("a")
    clock.advance(0.75)
    debouncer.push("ab")
    clock.advance(0.75)
    assert debouncer.poll() is None
    clock.advance(0.25)
    assert debouncer.poll() == "ab"


def test_pushing_the_same_value_does_not_restart():
    clock = FakeClock()
    debouncer = Debouncer(delay=1.0, clock=clock)
    debouncer.push("abc")
    clock.advance(0.5)
    debouncer.push("abc")
    clock.advance(0.5)
    assert debouncer.poll() == "abc"


def test_settled_value_is_not_repeated_without_change():
    clock = FakeClock()
    debouncer = Debouncer(delay=1.0, clock=clock)
    debouncer.push("abc")
    clock.advance(1.0)
    assert debouncer.poll() == "abc"
    debouncer.push("abc")
    clock.advance(5.0)
    assert debouncer.poll() is None
    assert not debouncer.pending
