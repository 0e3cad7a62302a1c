# Responsibilities:
# - maintain crawl order (FIFO)
# - prevent a URL from being queued twice within one crawl invocation
# Single consumer: owned by one FrontierCrawler, no locking.
from collections import deque


class Frontier:
    def __init__(self, urls=None):
        self.queue = deque()      # FIFO queue of URLs to visit
        self.seen = set()         # URLs ever admitted in this invocation
        if urls:
            self.extend(urls)

    def push(self, url):
        # Rules:
        # - URL must not have been queued or popped already
        if not url or url in self.seen:
            return False
        self.queue.append(url)
        self.seen.add(url)
        return True

    def extend(self, urls):
        # Returns how many were admitted
        return sum(1 for url in urls if self.push(url))

    def pop(self):
        if not self.queue:
            return None
        return self.queue.popleft()

    def pending(self):
        return list(self.queue)

    def is_empty(self):
        return not bool(self.queue)

    def __len__(self):
        return len(self.queue)
