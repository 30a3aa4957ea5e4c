# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Indexed binary heap.

A priority queue whose entries can be re-prioritized and withdrawn in
logarithmic time, which :py:mod:`heapq` cannot do. Decimation keeps one
entry per candidate edge and withdraws the entries of all edges touched
by a collapse.

The layout follows the 1-based array heaps of Robert Sedgewick's
**Algorithms in C**, *Parts 1--4*.
"""


class MinHeap:
    """ Priority queue, smallest priority first.

    Entries are `(item, priority)` pairs. An item is queued at most once
    and entries of equal priority are served first come, first served.

    Parameters
    ----------
    items : iterable, optional
        Initial `(item, priority)` pairs.

    Note
    ----
    Items are looked up by hash, mesh items hash by identity.
    """

    def __init__(self, items=None):
        # Slot 0 is a sentinel so that the parent of slot k is k//2.
        # Slots hold (item, priority, ticket) where the ticket records
        # the arrival order.
        self._heap = [None]
        self._hpos = dict()
        self._count = 0

        if items is not None:
            for item, priority in items:
                self.push(item, priority)

    def __bool__(self):
        return len(self) > 0

    def __contains__(self, item):
        return item in self._hpos

    def __len__(self):
        return len(self._heap) - 1

    def __iter__(self):
        """ Entry iterator.

        Visits `(item, priority)` pairs in storage order, which is not
        sorted.
        """
        return ((item, priority) for item, priority, _ in self._heap[1:])

    @property
    def top(self):
        """ Entry of smallest priority.

        :type: (object, float)

        Raises
        ------
        IndexError
            If the queue is empty.
        """
        if not self:
            raise IndexError('top of empty heap')

        item, priority, _ = self._heap[1]
        return item, priority

    def pop(self):
        """ Remove and return the entry of smallest priority.

        Returns
        -------
        item : object
            The dequeued item.
        priority : float
            Its priority.

        Raises
        ------
        IndexError
            If the queue is empty.
        """
        if not self:
            raise IndexError('pop from empty heap')

        last = len(self)
        self._swap(1, last)

        item, priority, _ = self._heap.pop()
        del self._hpos[item]

        self._fixdown(1)
        return item, priority

    def push(self, item, priority):
        """ Queue an item.

        Pushing an item that is already queued changes its priority, see
        :meth:`update`.

        Parameters
        ----------
        item : object
            Hashable item.
        priority : float
            Sort key.
        """
        if item in self._hpos:
            self.update(item, priority)
            return

        slot = len(self._heap)
        self._heap.append((item, priority, self._count))
        self._hpos[item] = slot
        self._count += 1

        self._fixup(slot)

    def update(self, item, priority):
        """ Change the priority of a queued item.

        The item keeps its arrival ticket, so among equal priorities it
        is served in its original order.

        Raises
        ------
        KeyError
            If `item` is not queued.
        """
        slot = self._hpos[item]
        self._heap[slot] = (item, priority, self._heap[slot][2])

        self._fixup(slot)
        self._fixdown(slot)

    def remove(self, item):
        """ Withdraw a queued item.

        Returns
        -------
        float
            Priority the item was queued with.

        Raises
        ------
        KeyError
            If `item` is not queued.
        """
        slot = self._hpos[item]
        self._swap(slot, len(self))

        _, priority, _ = self._heap.pop()
        del self._hpos[item]

        # The entry moved into the vacated slot may violate the heap
        # property in either direction.
        if slot <= len(self):
            self._fixup(slot)
            self._fixdown(slot)

        return priority

    def discard(self, item):
        """ Withdraw an item if it is queued.

        Returns
        -------
        bool
            :obj:`True` if `item` was queued.
        """
        if item not in self._hpos:
            return False

        self.remove(item)
        return True

    def _less(self, i, j):
        """ Order of slots `i` and `j` by priority, then by ticket.
        """
        return self._heap[i][1:] < self._heap[j][1:]

    def _swap(self, i, j):
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]

        self._hpos[heap[i][0]] = i
        self._hpos[heap[j][0]] = j

    def _fixup(self, k):
        """ Sift the entry in slot `k` towards the root.
        """
        while k > 1:
            parent = k // 2

            if not self._less(k, parent):
                break

            self._swap(k, parent)
            k = parent

    def _fixdown(self, k):
        """ Sift the entry in slot `k` towards the leaves.
        """
        n = len(self)

        while 2 * k <= n:
            child = 2 * k

            # Pick the smaller of the two children.
            if child < n and self._less(child + 1, child):
                child += 1

            if not self._less(child, k):
                break

            self._swap(child, k)
            k = child
