#Partitions at or below this length are handed to insertion sort
SMALL_PARTITION = 20


def bubble_sort(a):
    """
    Textbook bubble sort, in place.
    Every pass bubbles the largest remaining value to the end of the
    unsorted suffix, so the suffix shrinks by one each pass.
    """
    for end in range(len(a) - 1, 0, -1):
        for i in range(end):
            if a[i] > a[i + 1]:
                a[i], a[i + 1] = a[i + 1], a[i]


def insertion_sort(a, lo=0, hi=None):
    """
    Insertion sort of a[lo:hi], in place.

    For each position the key is shifted left while its predecessor is
    greater; the inner loop stops at the first predecessor that is no
    larger. O(n) on nearly-sorted input, O(n^2) worst case.
    """
    if hi is None:
        hi = len(a)

    #i runs up to hi-1, the last valid index of the range
    for i in range(lo + 1, hi):
        if a[i - 1] <= a[i]:
            continue
        key = a[i]
        j = i - 1
        #j never drops below lo, so a[j] and a[j+1] stay inside [lo, i]
        while j >= lo and a[j] > key:
            a[j + 1] = a[j]
            j -= 1
        a[j + 1] = key


def partition(a, lo=0, hi=None):
    """
    Partition a[lo:hi] around its last element and return the pivot's final index.

    After the call every value <= pivot sits left of the returned index and
    every value > pivot sits right of it.
    A range with fewer than 2 elements is left alone and lo + 1 is returned.
    """
    if hi is None:
        hi = len(a)
    if hi - lo < 2:
        return lo + 1

    last = hi - 1
    pivot = a[last]

    slow = lo
    for fast in range(lo, last):
        if a[fast] <= pivot:
            #slow starts at lo and grows by at most one per step of fast,
            #so lo <= slow <= fast < last holds on every swap
            a[slow], a[fast] = a[fast], a[slow]
            slow += 1

    #slow <= last here; when slow == last the pivot is already in place
    if slow != last:
        a[slow], a[last] = a[last], a[slow]
    return slow


def quickersort(a, lo=0, hi=None):
    """
    Quicksort of a[lo:hi] falling back to insertion sort for short ranges.

    Recursion always goes into the shorter side of a partition and the loop
    continues with the longer side, so the stack never grows past O(log n)
    frames even on adversarial input.
    """
    if hi is None:
        hi = len(a)

    while True:
        #A range of length <= 1 is always sorted
        if hi - lo <= SMALL_PARTITION:
            if hi - lo >= 2:
                insertion_sort(a, lo, hi)
            return

        p = partition(a, lo, hi)

        #a[p] is final; [lo, p) and [p+1, hi) are sorted independently
        if p - lo < hi - (p + 1):
            quickersort(a, lo, p)
            lo = p + 1
        else:
            quickersort(a, p + 1, hi)
            hi = p


__all__ = [
    'SMALL_PARTITION',
    'bubble_sort',
    'insertion_sort',
    'partition',
    'quickersort',
]
